from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration
resolution (defaults, persisted file, command-line overrides), tag
generation and result rendering. The encoded tag may go to stdout, so all
human-readable output is written to stderr.
"""

import json
import sys
from dataclasses import asdict
from typing import List, Optional

from ostree_coswid.core.pipeline.engine import run_generation
from ostree_coswid.core.pipeline.stages.validator import validate_config
from ostree_coswid.domain.config import get_default_config, load_config, merge_overrides
from ostree_coswid.domain.errors import (
    Cancelled,
    ConfigError,
    CoswidError,
    NotFound,
    causal_chain,
)
from ostree_coswid.domain.result_models import GenerationResult
from ostree_coswid.infra.cancellation import CancellationToken
from ostree_coswid.infra.logging import LoggingConfig, configure_logging, get_logger
from ostree_coswid.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 success, 1 failure, 2 bad input, 130 cancelled).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console only until the configuration is known)
    configure_logging(LoggingConfig(level="DEBUG" if args.debug else "INFO", console=True))

    # 3. Configuration resolution
    base_conf = get_default_config() if args.use_defaults else load_config(args.config_file)
    raw_conf = merge_overrides(base_conf, cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    configure_logging(
        LoggingConfig(
            level=clean_conf["log_level"],
            console=True,
            log_file=clean_conf["log_file"] or None,
        ),
        force=True,
    )

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    # 4. Generation phase
    cancel = CancellationToken()
    try:
        result = run_generation(clean_conf, cancel, dry_run=bool(args.dry_run))
    except KeyboardInterrupt:
        cancel.cancel()
        logger.warning("Interrupted by user. No output was written.")
        return EXIT_CANCELLED
    except Cancelled as e:
        _report_failure(e)
        return EXIT_CANCELLED
    except (NotFound, ConfigError) as e:
        _report_failure(e)
        return EXIT_USAGE
    except CoswidError as e:
        _report_failure(e)
        return EXIT_FAILURE

    # 5. Output rendering phase
    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2), file=sys.stderr)
    else:
        _print_human_summary(result)

    return EXIT_OK

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _report_failure(error: BaseException) -> None:
    """Print the causal chain of a failure to stderr and log the traceback."""
    chain = causal_chain(error)
    logger.debug("Generation failed", exc_info=error)
    print(f"ERROR: {' -> '.join(chain)}", file=sys.stderr)


def _print_human_summary(result: GenerationResult) -> None:
    """Render a GenerationResult as a short report on stderr."""
    out = sys.stderr
    print(f"Reference: {result.reference}", file=out)
    print(f"Commit: {result.commit_id}", file=out)
    print(f"Tag id: {result.tag_id}", file=out)
    print(f"Files: {result.files}", file=out)
    print(f"Directories: {result.directories}", file=out)
    if result.skipped:
        print(f"Skipped (links/special files): {result.skipped}", file=out)
    if result.dry_run:
        print("Dry run: nothing written.", file=out)
    else:
        print(f"Written: {result.output_path} ({result.bytes_written} bytes)", file=out)

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
