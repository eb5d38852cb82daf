from arc_agents.templates.reasoning_prompts import build_system_prompt, build_turn_text, build_user_message


def test_system_prompt_carries_full_research_brief():
    prompt = build_system_prompt(["ACTION1", "ACTION2", "RESET"])

    for heading in (
        "## OBJECTIVE",
        "## GAME CONTEXT",
        "## AVAILABLE ACTIONS",
        "## RESEARCH METHODOLOGY",
        "### 3. KNOWLEDGE SYNTHESIS",
        "## ANALYSIS FOCUS AREAS",
    ):
        assert heading in prompt
    assert "- Document unexpected behaviors or anomalies" in prompt
    assert "- Identify patterns across different game states" in prompt
    assert "**Visual Feedback**" in prompt
    assert "- ACTION2: " in prompt
    assert "ACTION6" not in prompt


def test_system_prompt_mentions_coordinates_only_with_click():
    prompt = build_system_prompt(["ACTION6", "RESET"])
    assert "Provide coordinates only when selecting ACTION6" in prompt


def test_turn_text_and_message_shape():
    text = build_turn_text(["ACTION1", "RESET"], [[[0, 1]]])
    assert "Allowed actions this turn: ACTION1, RESET" in text
    assert "Grid 0:" in text

    msg = build_user_message(text, "data:image/png;base64,AAAA")
    assert msg["role"] == "user"
    assert [p["type"] for p in msg["content"]] == ["input_text", "input_image"]
