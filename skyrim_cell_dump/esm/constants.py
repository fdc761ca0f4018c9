"""Plugin format constants, flags, and magic numbers (TES5 / Skyrim)."""

# Header sizes
RECORD_HEADER_SIZE = 24     # type(4) + size(4) + flags(4) + formid(4) + ts(2) + vc(2) + ver(2) + pad(2)
GROUP_HEADER_SIZE = 24      # 'GRUP'(4) + size(4) + label(4) + grouptype(4) + ts(2) + vc(2) + pad(4)
FIELD_HEADER_SIZE = 6       # type(4) + size(2)

# Record / group tags
TAG_GROUP = b"GRUP"
TAG_PLUGIN_HEADER = b"TES4"
TAG_WORLD = b"WRLD"
TAG_CELL = b"CELL"

REC_WORLD = "WRLD"
REC_CELL = "CELL"

# Field tags
SUB_HEDR = "HEDR"  # version(f32) + records and groups(i32) + next object id(u32)
SUB_CNAM = "CNAM"  # Author
SUB_SNAM = "SNAM"  # Description
SUB_MAST = "MAST"  # Master filename (repeated, ordered)
SUB_INTV = "INTV"  # Internal version info
SUB_XXXX = "XXXX"  # Size override for the next field
SUB_EDID = "EDID"  # Editor ID
SUB_XCLC = "XCLC"  # Cell grid coordinates

HEDR_SIZE = 12

# XCLC layouts: x(i32) + y(i32), then 4 trailing bytes in v0.94 files (12 total)
# or land-hide flags(u8) + padding(3) + 4 bytes in current ones (16 total)
XCLC_COORDS_SIZE = 8
XCLC_LEGACY_SIZE = 12

# Group types
GROUP_TOP = 0           # Top-level group, label = record type
GROUP_TOPIC_CHILDREN = 7    # Never recursed into; all other non-top types are

# Top-level groups worth descending into
TRAVERSED_TOP_LABELS = frozenset({TAG_WORLD, TAG_CELL})

# Record flags
FLAG_MASTER = 0x00000001
FLAG_DELETED_GROUP = 0x00000010
FLAG_DELETED = 0x00000020
FLAG_CONSTANT = 0x00000040
FLAG_LOCALIZED = 0x00000080
FLAG_INACCESSIBLE = 0x00000100
FLAG_LIGHT_MASTER = 0x00000200
FLAG_PERSISTENT = 0x00000400
FLAG_INITIALLY_DISABLED = 0x00000800
FLAG_IGNORED = 0x00001000
FLAG_VISIBLE_WHEN_DISTANT = 0x00008000
FLAG_RANDOM_ANIM_START = 0x00010000
FLAG_OFF_LIMITS = 0x00020000
FLAG_COMPRESSED = 0x00040000
FLAG_CANT_WAIT = 0x00080000
FLAG_IGNORE_OBJECT_INTERACTION = 0x00100000
FLAG_IS_MARKER = 0x00800000
FLAG_NO_AI_ACQUIRE = 0x02000000
FLAG_NAVMESH_FILTER = 0x04000000
FLAG_NAVMESH_BOUNDING_BOX = 0x08000000
FLAG_REFLECTED_BY_AUTO_WATER = 0x10000000
FLAG_DONT_HAVOK_SETTLE = 0x20000000
FLAG_NO_RESPAWN = 0x40000000
FLAG_MULTI_BOUND = 0x80000000

KNOWN_RECORD_FLAGS = (
    FLAG_MASTER | FLAG_DELETED_GROUP | FLAG_DELETED | FLAG_CONSTANT
    | FLAG_LOCALIZED | FLAG_INACCESSIBLE | FLAG_LIGHT_MASTER | FLAG_PERSISTENT
    | FLAG_INITIALLY_DISABLED | FLAG_IGNORED | FLAG_VISIBLE_WHEN_DISTANT
    | FLAG_RANDOM_ANIM_START | FLAG_OFF_LIMITS | FLAG_COMPRESSED | FLAG_CANT_WAIT
    | FLAG_IGNORE_OBJECT_INTERACTION | FLAG_IS_MARKER | FLAG_NO_AI_ACQUIRE
    | FLAG_NAVMESH_FILTER | FLAG_NAVMESH_BOUNDING_BOX | FLAG_REFLECTED_BY_AUTO_WATER
    | FLAG_DONT_HAVOK_SETTLE | FLAG_NO_RESPAWN | FLAG_MULTI_BOUND
)

# Compressed payloads start with the uncompressed size (u32)
COMPRESSED_SIZE_PREFIX = 4

# Group nesting in shipped plugins never goes past ~6 levels
DEFAULT_MAX_DEPTH = 32

# Single-byte codepage used for strings
STRING_ENCODING = "cp1252"
