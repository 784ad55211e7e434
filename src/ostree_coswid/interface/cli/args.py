from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema (three positionals plus tag metadata,
traversal and diagnostic options) and translates the parsed namespace into
configuration overrides.
"""

import argparse
from typing import Any, Dict

from ostree_coswid.domain.config import STORE_TYPES
from ostree_coswid.domain.constants import APP_VERSION, VERSION_SCHEMES

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the ostree-coswid CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="ostree-coswid",
        description=(
            "Generate a CBOR-encoded CoSWID tag describing every file and "
            "directory of a commit in a content-addressed store."
        ),
    )

    # --- Positional inputs ---
    p.add_argument("store_path", nargs="?", default=None, help="Location of the store.")
    p.add_argument("reference", nargs="?", default=None, help="Reference (ref or commit) to describe.")
    p.add_argument("output_path", nargs="?", default=None, help="Output file, '-' for stdout.")

    # --- Store access ---
    p.add_argument(
        "--store-type",
        dest="store_type",
        choices=STORE_TYPES,
        default=None,
        help="Store backend (default: ostree).",
    )

    # --- Tag metadata ---
    p.add_argument("--tag-id", dest="tag_id", default=None,
                   help="Tag id, may contain {reference} and {commit}.")
    p.add_argument("--tag-version", dest="tag_version", type=int, default=None,
                   help="Revision of the tag.")
    p.add_argument("--software-name", dest="software_name", default=None,
                   help="Name of the described software.")
    p.add_argument("--software-version", dest="software_version", default=None,
                   help="Version of the described software.")
    p.add_argument("--version-scheme", dest="version_scheme", choices=sorted(VERSION_SCHEMES),
                   default=None, help="Scheme of --software-version.")
    p.add_argument("--entity-name", dest="entity_name", default=None,
                   help="Display name of the tag creator.")
    p.add_argument("--entity-reg-id", dest="entity_reg_id", default=None,
                   help="Registration id of the tag creator.")

    # --- Traversal and output ---
    p.add_argument("-j", "--jobs", type=int, default=None,
                   help="Number of threads hashing file content.")
    p.add_argument("--sort", dest="sort_entries", action="store_true",
                   help="Sort directory children by name instead of store order.")
    p.add_argument("--cbor-tag", dest="cbor_tagged", action="store_true",
                   help="Wrap the document in the concise-swid-tag CBOR tag.")
    p.add_argument("--dry-run", action="store_true",
                   help="Build and encode the tag without writing it.")

    # --- Configuration and diagnostics ---
    p.add_argument("--config", dest="config_file", default=None,
                   help="JSON configuration file.")
    p.add_argument("--use-defaults", action="store_true",
                   help="Ignore the persisted configuration file.")
    p.add_argument("--dump-config", action="store_true",
                   help="Print the effective configuration and exit.")
    p.add_argument("--log-file", dest="log_file", default=None,
                   help="Also write diagnostics to this rotating log file.")
    p.add_argument("--debug", action="store_true",
                   help="Elevate logging verbosity to DEBUG.")
    p.add_argument("--json", dest="json_output", action="store_true",
                   help="Print the run summary as JSON on stderr.")
    p.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Values left at None are not overrides; the merge step skips them.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {
        "store_path": args.store_path,
        "reference": args.reference,
        "output_path": args.output_path,
        "store_type": args.store_type,
        "tag_id": args.tag_id,
        "tag_version": args.tag_version,
        "software_name": args.software_name,
        "software_version": args.software_version,
        "version_scheme": args.version_scheme,
        "entity_name": args.entity_name,
        "entity_reg_id": args.entity_reg_id,
        "jobs": args.jobs,
        "log_file": args.log_file,
    }

    if args.sort_entries:
        overrides["sort_entries"] = True
    if args.cbor_tagged:
        overrides["cbor_tagged"] = True
    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides
