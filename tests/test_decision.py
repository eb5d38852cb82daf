import json
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from arc_agents.structs import GameAction
from arc_agents.templates.decision import DecisionClient, Usage, parse_decision, read_usage
from conftest import choice, function_call

ALLOWED = ["ACTION1", "ACTION2", "ACTION3", "ACTION4", "RESET"]
ALLOWED_CLICK = ["ACTION1", "ACTION6", "RESET"]


def test_simple_action_has_no_coordinates():
    d = parse_decision([function_call(choice("ACTION2"))], ALLOWED)
    assert d.action is GameAction.ACTION2
    assert d.coords is None
    assert d.call_id == "call_1"
    assert d.hypothesis.startswith("Moves shift")
    assert not d.fallback


def test_click_coordinates_are_clamped():
    d = parse_decision([function_call(choice("ACTION6", x=70, y=-1))], ALLOWED_CLICK)
    assert d.action is GameAction.ACTION6
    assert d.coords == {"x": 63, "y": 0}


@pytest.mark.parametrize("x,y", [(0, 0), (12, 40), (63, 63)])
def test_click_coordinates_in_range_are_kept(x, y):
    d = parse_decision([function_call(choice("ACTION6", x=x, y=y))], ALLOWED_CLICK)
    assert d.coords == {"x": x, "y": y}


@pytest.mark.parametrize("extra", [{}, {"x": None, "y": 5}, {"x": "10", "y": "10"}, {"x": True, "y": 2}])
def test_click_without_usable_coordinates_defaults_to_origin(extra):
    d = parse_decision([function_call(choice("ACTION6", **extra))], ALLOWED_CLICK)
    assert d.action is GameAction.ACTION6
    assert d.coords == {"x": 0, "y": 0}


def test_coordinates_dropped_for_simple_action():
    d = parse_decision([function_call(choice("ACTION1", x=4, y=4))], ALLOWED_CLICK)
    assert d.action is GameAction.ACTION1
    assert (d.x, d.y) == (None, None)


def test_no_function_call_falls_back_to_reset(caplog):
    items = [{"type": "message", "content": [{"type": "output_text", "text": "I think UP"}]}]
    d = parse_decision(items, ALLOWED)
    assert d.action is GameAction.RESET
    assert d.fallback
    assert d.output_items == items
    assert "defaulting to RESET" in caplog.text


@pytest.mark.parametrize(
    "item",
    [
        {"type": "function_call", "call_id": "c", "arguments": "{not json"},
        {"type": "function_call", "call_id": "c", "arguments": "[1, 2]"},
        {"type": "function_call", "call_id": "c", "arguments": 42},
        {"type": "function_call", "call_id": "c", "arguments": ["ACTION1"]},
        function_call(choice("ACTION5")),
        function_call({"action": 3}),
        function_call(choice("ACTION2", mood="curious")),
    ],
)
def test_malformed_decisions_fall_back_to_reset(item):
    d = parse_decision([item], ALLOWED)
    assert d.action is GameAction.RESET
    assert d.fallback


def test_only_first_function_call_is_used():
    items = [function_call(choice("ACTION3"), "call_a"), function_call(choice("ACTION4"), "call_b")]
    d = parse_decision(items, ALLOWED)
    assert d.action is GameAction.ACTION3
    assert d.call_id == "call_a"
    assert len(d.output_items) == 2


def test_sdk_items_are_dumped_to_dicts():
    item = MagicMock()
    item.type = "function_call"
    item.call_id = "call_x"
    item.arguments = json.dumps(choice("ACTION1"))
    item.model_dump.return_value = {"type": "function_call", "call_id": "call_x"}

    d = parse_decision([item], ALLOWED)

    assert d.action is GameAction.ACTION1
    assert d.output_items == [{"type": "function_call", "call_id": "call_x"}]
    item.model_dump.assert_called_once_with(exclude_none=True)


def test_read_usage():
    response = SimpleNamespace(
        usage=SimpleNamespace(
            input_tokens=100,
            output_tokens=40,
            total_tokens=140,
            input_tokens_details=SimpleNamespace(cached_tokens=60),
            output_tokens_details=SimpleNamespace(reasoning_tokens=30),
        )
    )
    assert read_usage(response) == Usage(
        input_tokens=100, cached_input_tokens=60, output_tokens=40, reasoning_tokens=30, total_tokens=140
    )
    assert read_usage(SimpleNamespace(usage=None)) == Usage()


def _fake_openai(output, usage=None):
    client = MagicMock()
    client.responses.create.return_value = SimpleNamespace(output=output, usage=usage)
    return client


def test_decide_sends_forced_single_tool_call():
    openai_client = _fake_openai([function_call(choice("ACTION2"))])
    dc = DecisionClient(model="gpt-5", reasoning_effort="low", client=openai_client, debug_path="")
    tools = [{"type": "function", "name": "choose_action"}]

    d = dc.decide([{"role": "user", "content": "hi"}], tools, "be smart", ALLOWED, tag="g")

    kwargs = openai_client.responses.create.call_args.kwargs
    assert kwargs["model"] == "gpt-5"
    assert kwargs["tool_choice"] == "required"
    assert kwargs["parallel_tool_calls"] is False
    assert kwargs["store"] is True
    assert kwargs["tools"] == tools
    assert kwargs["instructions"] == "be smart"
    assert kwargs["reasoning"] == {"effort": "low", "summary": "auto"}
    assert d.action is GameAction.ACTION2
    assert d.usage == Usage()


def test_decide_omits_reasoning_without_effort_and_dumps_input(tmp_path):
    path = tmp_path / "messages.json"
    openai_client = _fake_openai([])
    dc = DecisionClient(model="gpt-5", reasoning_effort="", client=openai_client, debug_path=str(path))
    items = [{"role": "user", "content": "hello"}]

    d = dc.decide(items, [], "", ALLOWED)

    assert "reasoning" not in openai_client.responses.create.call_args.kwargs
    assert json.loads(path.read_text()) == items
    assert d.action is GameAction.RESET


def test_decide_propagates_transport_errors():
    openai_client = MagicMock()
    openai_client.responses.create.side_effect = ConnectionError("boom")
    dc = DecisionClient(model="gpt-5", reasoning_effort="", client=openai_client, debug_path="")
    with pytest.raises(ConnectionError):
        dc.decide([], [], "", ALLOWED)
