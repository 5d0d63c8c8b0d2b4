"""
Command Line Interface

gh-pr-comments PR [--repo OWNER/NAME] [--include-resolved] [--config FILE] [-v]
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .api import CommentsRequest, PRCommentsAPI
from .config import load_config, resolve_token, setup_logging
from .errors import PRCommentsError
from .github.resolver import resolve_reference


logger = logging.getLogger(__name__)

EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gh-pr-comments",
        description="Extract GitHub PR comments as markdown for LLM consumption",
    )
    parser.add_argument(
        "pr",
        help="PR number, PR URL, or 'owner/repo/pull/N'",
    )
    parser.add_argument(
        "-r", "--repo",
        metavar="OWNER/NAME",
        help="GitHub repository in 'owner/repo' format (default: git remote 'origin')",
    )
    parser.add_argument(
        "--include-resolved",
        action="store_true",
        help="Include comments from resolved review threads",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug output)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def run(args: argparse.Namespace) -> str:
    """Run the pipeline and return the rendered document."""
    config = load_config(args.config)
    setup_logging(config.logging, args.verbose)
    logger.debug(f"Configuration: {config.to_dict()}")

    ref = resolve_reference(args.pr, args.repo)
    logger.info(f"Resolved {args.pr!r} to {ref}")

    config.github.token = resolve_token(config)
    api = PRCommentsAPI.from_config(config)
    try:
        return api.generate_markdown(CommentsRequest(ref=ref, include_resolved=args.include_resolved))
    finally:
        api.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    try:
        document = run(args)
    except PRCommentsError as e:
        print(f"error: {e.message}", file=sys.stderr)
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("error: interrupted", file=sys.stderr)
        return EXIT_INTERRUPTED

    # 실패 시 부분 출력 없음: 문서 전체를 한 번에 기록
    sys.stdout.write(document)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
