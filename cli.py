
import argparse
import json
import logging
import sys
from pathlib import Path

from paperpilot import __version__
from paperpilot.config import Config
from paperpilot.errors import PaperPilotError
from paperpilot.llm.base import LLMClient
from paperpilot.logging_utils import configure_logging
from paperpilot.orchestrator import ReviewOrchestrator

logger = logging.getLogger("paperpilot.cli")


def serve(args, cfg: Config):
    import uvicorn
    from paperpilot.api.app import create_app

    if args.port is not None:
        cfg.port = args.port
    app = create_app(cfg)
    logger.info("PaperPilot Server v%s running at http://%s:%d", __version__, args.host, cfg.port)
    logger.info("Model: %s, timeout: %.0fs", cfg.model_name, cfg.timeout)
    uvicorn.run(app, host=args.host, port=cfg.port, log_level=cfg.log_level.lower())


def review(args, cfg: Config) -> int:
    payload = json.loads(Path(args.task).read_text(encoding="utf-8"))
    llm = LLMClient(model_name=cfg.model_name, timeout=cfg.timeout)
    orchestrator = ReviewOrchestrator(llm, cfg)
    try:
        outcome = orchestrator.review(payload)
    except PaperPilotError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 1

    text = json.dumps(outcome.to_response(), indent=2)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Saved review to {args.output}")
    else:
        print(text)
    return 0


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(prog="paperpilot")
    ap.add_argument("--model", type=str, help="Completion model (default: PAPERPILOT_MODEL or gpt-4o)")
    ap.add_argument("--timeout", type=float, help="Upstream and per-review deadline in seconds (default: 30)")
    sub = ap.add_subparsers(dest="command", required=True)

    ap_serve = sub.add_parser("serve", help="Run the HTTP API.")
    ap_serve.add_argument("--host", type=str, default="0.0.0.0")
    ap_serve.add_argument("--port", type=int, help="Listen port (default: PORT or 3001)")

    ap_review = sub.add_parser("review", help="Review one paper given as a JSON task file.")
    ap_review.add_argument("task", type=str, help="Path to a JSON file shaped like the /analyze/review-paper body")
    ap_review.add_argument("--output", type=str, help="Write the outcome JSON here instead of stdout")

    args = ap.parse_args(argv)

    cfg = Config.from_env()
    if args.model:
        cfg.model_name = args.model
    if args.timeout:
        cfg.timeout = args.timeout
    configure_logging(cfg.log_level)

    if args.command == "serve":
        serve(args, cfg)
        return 0
    return review(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
