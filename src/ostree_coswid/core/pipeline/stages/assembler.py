from __future__ import annotations

"""
Tag Assembler Stage.

Wraps the walked root directory into the top-level CoSWID tag, attaching
the static authoring metadata of the run. No computation happens here
beyond field assignment.
"""

import logging
import string
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ostree_coswid.domain.constants import (
    DEFAULT_ENTITY_NAME,
    DEFAULT_SOFTWARE_NAME,
    DEFAULT_TAG_ID,
    VERSION_SCHEMES,
)
from ostree_coswid.domain.coswid_models import (
    CoSWIDTag,
    DirectoryEntry,
    EntityEntry,
    EntityRole,
    Payload,
)
from ostree_coswid.domain.errors import ConfigError

logger = logging.getLogger(__name__)

_TEMPLATE_FIELDS = ("reference", "commit")


@dataclass(frozen=True)
class TagMetadata:
    """
    Static metadata of one generation run.

    Attributes:
        tag_id_template: Tag identifier, optionally with {reference}/{commit}.
        software_name: Name of the described software.
        entity_name: Display name of the tag creator.
        tag_version: Revision of the tag.
        software_version: Optional software version string.
        version_scheme: Optional registered version scheme name.
        entity_reg_id: Optional registration id of the tag creator.
    """
    tag_id_template: str = DEFAULT_TAG_ID
    software_name: str = DEFAULT_SOFTWARE_NAME
    entity_name: str = DEFAULT_ENTITY_NAME
    tag_version: int = 0
    software_version: Optional[str] = None
    version_scheme: Optional[str] = None
    entity_reg_id: Optional[str] = None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> TagMetadata:
        """Build metadata from a validated configuration dictionary."""
        return cls(
            tag_id_template=cfg["tag_id"],
            software_name=cfg["software_name"],
            entity_name=cfg["entity_name"],
            tag_version=cfg["tag_version"],
            software_version=cfg["software_version"] or None,
            version_scheme=cfg["version_scheme"] or None,
            entity_reg_id=cfg["entity_reg_id"] or None,
        )


def format_tag_id(template: str, reference: str, commit_id: str) -> str:
    """
    Expand the tag identifier template.

    Only the {reference} and {commit} placeholders are recognized. A
    template without placeholders is returned unchanged.

    Raises:
        ConfigError: If the template uses an unknown placeholder.
    """
    fields = [f for _, f, _, _ in string.Formatter().parse(template) if f is not None]
    unknown = [f for f in fields if f not in _TEMPLATE_FIELDS]
    if unknown:
        raise ConfigError(f"Unknown tag id placeholder(s): {', '.join(unknown)}")
    if not fields:
        return template
    return template.format(reference=reference, commit=commit_id)


def assemble_tag(
        root: Optional[DirectoryEntry],
        metadata: TagMetadata,
        reference: str = "",
        commit_id: str = "",
) -> CoSWIDTag:
    """
    Construct the CoSWID tag of a walked tree.

    Args:
        root: Root directory entry, or None if no tree was produced.
        metadata: Static run metadata.
        reference: Resolved reference name, for the tag id template.
        commit_id: Resolved commit id, for the tag id template.

    Returns:
        CoSWIDTag: A corpus tag whose payload wraps ``root``.
    """
    scheme_id: Optional[int] = None
    if metadata.version_scheme:
        try:
            scheme_id = VERSION_SCHEMES[metadata.version_scheme]
        except KeyError:
            raise ConfigError(f"Unknown version scheme '{metadata.version_scheme}'") from None

    entity = EntityEntry(
        entity_name=metadata.entity_name,
        role=EntityRole.TAG_CREATOR,
        reg_id=metadata.entity_reg_id,
    )

    tag = CoSWIDTag(
        tag_id=format_tag_id(metadata.tag_id_template, reference, commit_id),
        tag_version=metadata.tag_version,
        corpus=True,
        patch=False,
        supplemental=False,
        software_name=metadata.software_name,
        software_version=metadata.software_version,
        version_scheme=scheme_id,
        entity=entity,
        payload=Payload(directory=root) if root is not None else None,
    )
    logger.debug(f"Assembled tag '{tag.tag_id}'")
    return tag
