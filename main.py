import argparse
import logging
import sys

from arc_agents import AVAILABLE_AGENTS, GameClient, Phase, Swarm
from arc_agents import config
from arc_agents.swarm import select_games

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
log = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Play ARC-AGI-3 games with a reasoning agent.")
    parser.add_argument("--agent", default="reasoningagent", choices=sorted(AVAILABLE_AGENTS.keys()))
    parser.add_argument("--model", default="", help="model name (default: $OPENAI_MODEL or gpt-5)")
    parser.add_argument("--effort", default="", help="reasoning effort (default: $REASONING_EFFORT)")
    parser.add_argument("--game", default="", help="game_id prefix or exact id (default: $GAME_ID, all games)")
    args = parser.parse_args()

    logging.getLogger("openai").setLevel(logging.CRITICAL)
    logging.getLogger("httpx").setLevel(logging.CRITICAL)

    if not config.arc_api_key():
        log.error("Missing ARC_API_KEY in environment")
        return 1
    if not config.openai_api_key():
        log.error("Missing OPENAI_API_KEY in environment")
        return 1

    model = args.model or config.default_model()
    effort = args.effort or config.default_reasoning_effort()
    game_filter = args.game or config.default_game_filter()
    log.info(f"Config -> model={model} effort={effort or 'default'} game_filter={game_filter or 'all'}")

    client = GameClient()
    tags = ["agent", "reasoning_agent", model] + ([effort] if effort else []) + config.extra_tags()
    try:
        games = select_games(client, game_filter)
        swarm = Swarm(
            AVAILABLE_AGENTS[args.agent],
            games,
            client,
            tags=tags,
            agent_kwargs={"model": model, "reasoning_effort": effort},
        )
        swarm.install_signal_handlers()
        results = swarm.main()
    except Exception as e:
        log.error(f"Run failed: {e}", exc_info=True)
        return 1
    finally:
        client.close()

    for s in results:
        log.info(f"{s.game_id}: {s.phase.value} score={s.final_score} actions={s.action_counter} guid={s.guid}")
    return 1 if any(s.phase is Phase.FAILED for s in results) else 0


if __name__ == "__main__":
    sys.exit(main())
