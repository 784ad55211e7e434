from __future__ import annotations

"""
CoSWID CBOR Codec.

Serializes a CoSWIDTag into the concise binary wire format (CBOR maps with
the integer keys registered by RFC 9393) and decodes it back. Optional
fields that are absent are omitted from the maps entirely. One-or-many
fields keep their collapsed shape on the wire: a bare value for one child,
an array for several. Encoding is canonical, so equal tags give equal bytes.
"""

import logging
from typing import Any, BinaryIO, Callable, Dict, List, Optional

import cbor2

from ostree_coswid.domain.constants import (
    COSWID_CBOR_TAG,
    KEY_CORPUS,
    KEY_DIRECTORY,
    KEY_ENTITY,
    KEY_ENTITY_NAME,
    KEY_FILE,
    KEY_FILE_VERSION,
    KEY_FS_NAME,
    KEY_HASH,
    KEY_PATCH,
    KEY_PATH_ELEMENTS,
    KEY_PAYLOAD,
    KEY_REG_ID,
    KEY_ROLE,
    KEY_ROOT,
    KEY_SIZE,
    KEY_SOFTWARE_NAME,
    KEY_SOFTWARE_VERSION,
    KEY_SUPPLEMENTAL,
    KEY_TAG_ID,
    KEY_TAG_VERSION,
    KEY_THUMBPRINT,
    KEY_VERSION_SCHEME,
)
from ostree_coswid.domain.coswid_models import (
    CoSWIDTag,
    DirectoryEntry,
    EntityEntry,
    EntityRole,
    FileEntry,
    HashEntry,
    OneOrMany,
    PathElements,
    Payload,
)
from ostree_coswid.domain.errors import OutputIoError, SerializationError

logger = logging.getLogger(__name__)

CborMap = Dict[int, Any]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def encode_tag(tag: CoSWIDTag, *, tagged: bool = False) -> bytes:
    """
    Encode a tag to canonical CBOR.

    Args:
        tag: Complete tag to serialize.
        tagged: Wrap the map in the concise-swid-tag semantic tag.

    Returns:
        bytes: The encoded document.

    Raises:
        SerializationError: If a value cannot be represented in the schema.
    """
    document: Any = tag_to_map(tag)
    if tagged:
        document = cbor2.CBORTag(COSWID_CBOR_TAG, document)
    try:
        return cbor2.dumps(document, canonical=True)
    except (cbor2.CBOREncodeError, TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode tag '{tag.tag_id}': {e}") from e


def write_tag(tag: CoSWIDTag, sink: BinaryIO, *, tagged: bool = False) -> int:
    """
    Encode a tag and write it to ``sink``.

    Encoding completes before the first byte is written, so a tag that
    cannot be serialized leaves the sink untouched.

    Returns:
        int: Number of bytes written.

    Raises:
        SerializationError: If the tag cannot be encoded.
        OutputIoError: If the sink write fails.
    """
    data = encode_tag(tag, tagged=tagged)
    try:
        sink.write(data)
        sink.flush()
    except OSError as e:
        raise OutputIoError(f"Failed to write encoded tag: {e}") from e
    return len(data)


def decode_tag(data: bytes) -> CoSWIDTag:
    """
    Decode CBOR bytes produced by encode_tag back into a CoSWIDTag.

    Both plain and semantically tagged documents are accepted.

    Raises:
        SerializationError: If the bytes are not a well-formed CoSWID map.
    """
    try:
        document = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError) as e:
        raise SerializationError(f"Malformed CBOR document: {e}") from e

    if isinstance(document, cbor2.CBORTag):
        if document.tag != COSWID_CBOR_TAG:
            raise SerializationError(f"Unexpected CBOR tag {document.tag}")
        document = document.value

    return map_to_tag(document)

# -----------------------------------------------------------------------------
# MODEL -> MAP
# -----------------------------------------------------------------------------

def tag_to_map(tag: CoSWIDTag) -> CborMap:
    """Translate a tag into its integer-keyed map, omitting absent fields."""
    out: CborMap = {
        KEY_TAG_ID: _require(tag.tag_id, str, "tag-id"),
        KEY_SOFTWARE_NAME: _require(tag.software_name, str, "software-name"),
        KEY_ENTITY: _one_or_many(tag.entity, _entity_to_map, "entity"),
        KEY_TAG_VERSION: _require_int(tag.tag_version, "tag-version"),
    }
    _put(out, KEY_CORPUS, tag.corpus, bool, "corpus")
    _put(out, KEY_PATCH, tag.patch, bool, "patch")
    _put(out, KEY_SUPPLEMENTAL, tag.supplemental, bool, "supplemental")
    _put(out, KEY_SOFTWARE_VERSION, tag.software_version, str, "software-version")
    if tag.version_scheme is not None:
        out[KEY_VERSION_SCHEME] = _require_int(tag.version_scheme, "version-scheme")
    if tag.payload is not None:
        out[KEY_PAYLOAD] = _payload_to_map(tag.payload)
    return out


def _entity_to_map(entity: EntityEntry) -> CborMap:
    out: CborMap = {
        KEY_ENTITY_NAME: _require(entity.entity_name, str, "entity-name"),
        KEY_ROLE: _one_or_many(entity.role, _role_to_int, "role"),
    }
    _put(out, KEY_REG_ID, entity.reg_id, str, "reg-id")
    if entity.thumbprint is not None:
        out[KEY_THUMBPRINT] = _hash_to_array(entity.thumbprint)
    return out


def _role_to_int(role: EntityRole) -> int:
    if not isinstance(role, EntityRole):
        raise SerializationError(f"Invalid entity role: {role!r}")
    return int(role)


def _payload_to_map(payload: Payload) -> CborMap:
    out: CborMap = {}
    if payload.directory is not None:
        out[KEY_DIRECTORY] = _one_or_many(payload.directory, _directory_to_map, "directory")
    return out


def _directory_to_map(directory: DirectoryEntry) -> CborMap:
    out: CborMap = {
        KEY_FS_NAME: _require(directory.fs_name, str, "fs-name"),
        KEY_ROOT: _require(directory.root, str, "root"),
    }
    elements: CborMap = {}
    path_elements = directory.path_elements
    if path_elements.directory is not None:
        elements[KEY_DIRECTORY] = _one_or_many(path_elements.directory, _directory_to_map, "directory")
    if path_elements.file is not None:
        elements[KEY_FILE] = _one_or_many(path_elements.file, _file_to_map, "file")
    out[KEY_PATH_ELEMENTS] = elements
    return out


def _file_to_map(entry: FileEntry) -> CborMap:
    out: CborMap = {
        KEY_FS_NAME: _require(entry.fs_name, str, "fs-name"),
        KEY_ROOT: _require(entry.root, str, "root"),
        KEY_HASH: _hash_to_array(entry.hash),
    }
    if entry.size is not None:
        out[KEY_SIZE] = _require_int(entry.size, "size")
    _put(out, KEY_FILE_VERSION, entry.file_version, str, "file-version")
    return out


def _hash_to_array(entry: HashEntry) -> List[Any]:
    if not isinstance(entry, HashEntry):
        raise SerializationError(f"Invalid hash entry: {entry!r}")
    return [_require_int(entry.alg_id, "hash-alg-id"), _require(entry.value, bytes, "hash-value")]

# -----------------------------------------------------------------------------
# MAP -> MODEL
# -----------------------------------------------------------------------------

def map_to_tag(document: Any) -> CoSWIDTag:
    """Rebuild a CoSWIDTag from its integer-keyed map."""
    m = _as_map(document, "concise-swid-tag")
    payload: Optional[Payload] = None
    if KEY_PAYLOAD in m:
        payload_map = _as_map(m[KEY_PAYLOAD], "payload")
        payload = Payload(
            directory=_from_one_or_many(payload_map.get(KEY_DIRECTORY), _map_to_directory)
        )

    return CoSWIDTag(
        tag_id=_field(m, KEY_TAG_ID, str, "tag-id"),
        software_name=_field(m, KEY_SOFTWARE_NAME, str, "software-name"),
        entity=_from_one_or_many(_field(m, KEY_ENTITY, object, "entity"), _map_to_entity),
        tag_version=_field(m, KEY_TAG_VERSION, int, "tag-version"),
        corpus=m.get(KEY_CORPUS),
        patch=m.get(KEY_PATCH),
        supplemental=m.get(KEY_SUPPLEMENTAL),
        software_version=m.get(KEY_SOFTWARE_VERSION),
        version_scheme=m.get(KEY_VERSION_SCHEME),
        payload=payload,
    )


def _map_to_entity(value: Any) -> EntityEntry:
    m = _as_map(value, "entity")
    thumbprint = m.get(KEY_THUMBPRINT)
    return EntityEntry(
        entity_name=_field(m, KEY_ENTITY_NAME, str, "entity-name"),
        role=_from_one_or_many(_field(m, KEY_ROLE, object, "role"), _int_to_role),
        reg_id=m.get(KEY_REG_ID),
        thumbprint=_array_to_hash(thumbprint) if thumbprint is not None else None,
    )


def _int_to_role(value: Any) -> EntityRole:
    try:
        return EntityRole(value)
    except ValueError:
        raise SerializationError(f"Unknown entity role {value!r}") from None


def _map_to_directory(value: Any) -> DirectoryEntry:
    m = _as_map(value, "directory")
    elements = _as_map(m.get(KEY_PATH_ELEMENTS, {}), "path-elements")
    return DirectoryEntry(
        fs_name=_field(m, KEY_FS_NAME, str, "fs-name"),
        root=_field(m, KEY_ROOT, str, "root"),
        path_elements=PathElements(
            directory=_from_one_or_many(elements.get(KEY_DIRECTORY), _map_to_directory),
            file=_from_one_or_many(elements.get(KEY_FILE), _map_to_file),
        ),
    )


def _map_to_file(value: Any) -> FileEntry:
    m = _as_map(value, "file")
    return FileEntry(
        fs_name=_field(m, KEY_FS_NAME, str, "fs-name"),
        root=_field(m, KEY_ROOT, str, "root"),
        hash=_array_to_hash(_field(m, KEY_HASH, list, "hash")),
        size=m.get(KEY_SIZE),
        file_version=m.get(KEY_FILE_VERSION),
    )


def _array_to_hash(value: Any) -> HashEntry:
    if not isinstance(value, list) or len(value) != 2:
        raise SerializationError(f"Invalid hash entry: {value!r}")
    alg_id, digest = value
    if not isinstance(alg_id, int) or not isinstance(digest, bytes):
        raise SerializationError(f"Invalid hash entry: {value!r}")
    return HashEntry(alg_id=alg_id, value=digest)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _one_or_many(value: OneOrMany[Any], convert: Callable[[Any], Any], field: str) -> Any:
    if isinstance(value, list):
        if len(value) < 2:
            raise SerializationError(f"Field '{field}' holds a list of {len(value)} item(s)")
        return [convert(v) for v in value]
    if value is None:
        raise SerializationError(f"Field '{field}' is required")
    return convert(value)


def _from_one_or_many(value: Any, convert: Callable[[Any], Any]) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [convert(v) for v in value]
    return convert(value)


def _require(value: Any, expected: type, field: str) -> Any:
    if not isinstance(value, expected):
        raise SerializationError(
            f"Field '{field}' expects {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _require_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SerializationError(f"Field '{field}' expects an unsigned integer, got {value!r}")
    return value


def _put(out: CborMap, key: int, value: Any, expected: type, field: str) -> None:
    if value is not None:
        out[key] = _require(value, expected, field)


def _as_map(value: Any, what: str) -> Dict[Any, Any]:
    if not isinstance(value, dict):
        raise SerializationError(f"Expected a map for {what}, got {type(value).__name__}")
    return value


def _field(m: Dict[Any, Any], key: int, expected: type, field: str) -> Any:
    if key not in m:
        raise SerializationError(f"Missing required field '{field}'")
    return _require(m[key], expected, field)
