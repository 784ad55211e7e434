from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes the CoSWID integer key registry (RFC 9393), the hash algorithm
and role identifiers used on the wire, and the static tag metadata emitted
for every generated document.
"""

from typing import Dict

APP_VERSION = "0.1.0"

# -----------------------------------------------------------------------------
# STATIC TAG METADATA
# -----------------------------------------------------------------------------

DEFAULT_TAG_ID = "org.fedoraproject.iot.x86_64.stable.insert_version_here"
DEFAULT_SOFTWARE_NAME = "Fedora IoT OSTree"
DEFAULT_ENTITY_NAME = "Patrick Uiterwijk"
DEFAULT_REFERENCE = "fedora:fedora/stable/x86_64/iot"
DEFAULT_STORE_PATH = "./repo"

# Mount point every file and directory hash attests to
FS_ROOT = "/"

# Root directory of a walked tree carries no name
ROOT_DIRECTORY_NAME = ""

# -----------------------------------------------------------------------------
# CBOR WIRE REGISTRY
# -----------------------------------------------------------------------------

# Semantic tag for a concise-swid-tag (RFC 9393, section 8)
COSWID_CBOR_TAG = 1398229316

KEY_TAG_ID = 0
KEY_SOFTWARE_NAME = 1
KEY_ENTITY = 2
KEY_PAYLOAD = 6
KEY_HASH = 7
KEY_CORPUS = 8
KEY_PATCH = 9
KEY_SUPPLEMENTAL = 11
KEY_TAG_VERSION = 12
KEY_SOFTWARE_VERSION = 13
KEY_VERSION_SCHEME = 14
KEY_DIRECTORY = 16
KEY_FILE = 17
KEY_SIZE = 20
KEY_FILE_VERSION = 21
KEY_FS_NAME = 24
KEY_ROOT = 25
KEY_PATH_ELEMENTS = 26
KEY_ENTITY_NAME = 31
KEY_REG_ID = 32
KEY_ROLE = 33
KEY_THUMBPRINT = 34

# IANA Named Information Hash Algorithm Registry
HASH_ALG_SHA256 = 1
SHA256_DIGEST_SIZE = 32

# Read granularity for content hashing
HASH_CHUNK_SIZE = 64 * 1024

VERSION_SCHEMES: Dict[str, int] = {
    "multipartnumeric": 1,
    "multipartnumeric+suffix": 2,
    "alphanumeric": 3,
    "decimal": 4,
    "semver": 16384,
}
