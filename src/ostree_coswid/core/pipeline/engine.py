from __future__ import annotations

"""
Core orchestration pipeline.

Coordinates one tag generation run:
1. Validates configuration.
2. Opens the store and resolves the reference to a commit.
3. Walks the commit tree, hashing every regular file.
4. Assembles the CoSWID tag around the root directory.
5. Encodes the tag and writes it to the destination.

Nothing is written until the walk and the encoding have both succeeded,
so a failed or cancelled run leaves the destination untouched.
"""

import contextlib
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from ostree_coswid.core.analysis.tree_walker import SkipCallback, TreeWalker
from ostree_coswid.core.pipeline.components.encoder import encode_tag, write_tag
from ostree_coswid.core.pipeline.stages.assembler import TagMetadata, assemble_tag
from ostree_coswid.core.pipeline.stages.validator import validate_config
from ostree_coswid.domain.coswid_models import CoSWIDTag, DirectoryEntry, count_entries
from ostree_coswid.domain.errors import OutputIoError
from ostree_coswid.domain.result_models import GenerationResult
from ostree_coswid.infra.cancellation import CancellationToken
from ostree_coswid.infra.fs import STDOUT_SINK, normalize_path, open_output_sink
from ostree_coswid.infra.store import EntryKind, TreeStore, open_store

logger = logging.getLogger(__name__)


def run_generation(
        config: Optional[Dict[str, Any]],
        cancel: Optional[CancellationToken] = None,
        *,
        store: Optional[TreeStore] = None,
        dry_run: bool = False,
) -> GenerationResult:
    """
    Execute a full tag generation run.

    Args:
        config: Raw or partial configuration dictionary.
        cancel: Run cancellation token; a fresh one is created if omitted.
        store: Pre-opened store to use instead of opening ``store_path``.
               It is not closed by this function.
        dry_run: Build and encode the tag but skip the write.

    Returns:
        GenerationResult: Counters and identifiers of the emitted tag.

    Raises:
        CoswidError: Any resolution, walk, encoding or output failure.
    """
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    cancel = cancel or CancellationToken()
    reference = cfg["reference"]
    skipped_paths: List[str] = []

    def _record_skip(path: str, kind: EntryKind) -> None:
        skipped_paths.append(path)

    if store is not None:
        store_ctx: Any = contextlib.nullcontext(store)
    else:
        store_path = normalize_path(cfg["store_path"], os.getcwd())
        logger.info(f"Opening {cfg['store_type']} store at {store_path}")
        store_ctx = open_store(cfg["store_type"], store_path, cancel)

    with store_ctx as active_store:
        resolved = active_store.resolve(reference, cancel)
        logger.info(f"Resolved '{reference}' to commit {resolved.commit_id}")

        root = _walk(active_store, resolved.root, cancel, cfg, _record_skip)

    tag = assemble_tag(
        root,
        TagMetadata.from_config(cfg),
        reference=reference,
        commit_id=resolved.commit_id,
    )
    cancel.raise_if_cancelled()

    output_path = cfg["output_path"]
    if dry_run:
        size = len(encode_tag(tag, tagged=cfg["cbor_tagged"]))
        logger.info(f"Dry run: {size} bytes not written to {output_path}")
    else:
        size = _persist(tag, output_path, cfg["cbor_tagged"])
        logger.info(f"Tag written to {_describe_sink(output_path)} ({size} bytes)")

    return _build_result(tag, resolved.commit_id, reference, output_path, size, dry_run, skipped_paths)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _walk(
        store: TreeStore,
        root_handle: Any,
        cancel: CancellationToken,
        cfg: Dict[str, Any],
        on_skip: SkipCallback,
) -> DirectoryEntry:
    """Walk the tree, with a bounded hashing pool when more than one job is requested."""
    jobs = cfg["jobs"]
    if jobs <= 1:
        walker = TreeWalker(store, cancel, sort_entries=cfg["sort_entries"], on_skip=on_skip)
        return walker.walk(root_handle)

    logger.debug(f"Hashing with {jobs} worker threads")
    pool_cancel = cancel.child()
    with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="HashWorker") as executor:
        walker = TreeWalker(
            store, pool_cancel,
            executor=executor,
            sort_entries=cfg["sort_entries"],
            on_skip=on_skip,
        )
        try:
            return walker.walk(root_handle)
        except BaseException:
            # Pool shutdown waits for running hashes, which poll the token
            pool_cancel.cancel()
            raise


def _persist(tag: CoSWIDTag, destination: str, tagged: bool) -> int:
    """Encode and write the tag; a failed run leaves the destination as it was."""
    try:
        with open_output_sink(destination) as sink:
            return write_tag(tag, sink, tagged=tagged)
    except OSError as e:
        raise OutputIoError(f"Failed to write tag to '{destination}': {e}") from e


def _describe_sink(destination: str) -> str:
    return "stdout" if destination == STDOUT_SINK else destination


def _build_result(
        tag: CoSWIDTag,
        commit_id: str,
        reference: str,
        output_path: str,
        size: int,
        dry_run: bool,
        skipped_paths: List[str],
) -> GenerationResult:
    root = tag.root_directory
    stats = count_entries(root) if root is not None else None
    return GenerationResult(
        reference=reference,
        commit_id=commit_id,
        tag_id=tag.tag_id,
        output_path=output_path,
        files=stats.files if stats else 0,
        directories=stats.directories if stats else 0,
        skipped=len(skipped_paths),
        bytes_written=0 if dry_run else size,
        dry_run=dry_run,
        skipped_paths=list(skipped_paths),
    )
