import enum

# https://datatracker.ietf.org/doc/html/draft-ietf-secsh-filexfer-02
# https://datatracker.ietf.org/doc/html/draft-ietf-secsh-filexfer-04
# https://datatracker.ietf.org/doc/html/draft-ietf-secsh-filexfer-05
# https://datatracker.ietf.org/doc/html/draft-ietf-secsh-filexfer-13

SFTP_HIGHEST_PROTOCOL_VERSION = 6

class SSH_FXP(enum.Enum):
	INIT = 1
	VERSION = 2
	OPEN = 3
	CLOSE = 4
	READ = 5
	WRITE = 6
	LSTAT = 7
	FSTAT = 8
	SETSTAT = 9
	FSETSTAT = 10
	OPENDIR = 11
	READDIR = 12
	REMOVE = 13
	MKDIR = 14
	RMDIR = 15
	REALPATH = 16
	STAT = 17
	RENAME = 18
	READLINK = 19
	SYMLINK = 20
	LINK = 21
	BLOCK = 22
	UNBLOCK = 23
	STATUS = 101
	HANDLE = 102
	DATA = 103
	NAME = 104
	ATTRS = 105
	EXTENDED = 200
	EXTENDED_REPLY = 201

# open flags for protocol versions 1-4
class SSH_FXF(enum.IntFlag):
	READ = 0x00000001
	WRITE = 0x00000002
	APPEND = 0x00000004
	CREAT = 0x00000008
	TRUNC = 0x00000010
	EXCL = 0x00000020

PY_OPEN_TO_SSH_FXF = {
	'r': SSH_FXF.READ,
	'w': SSH_FXF.WRITE | SSH_FXF.TRUNC | SSH_FXF.CREAT,
	'x': SSH_FXF.WRITE | SSH_FXF.CREAT | SSH_FXF.EXCL,
	'a': SSH_FXF.WRITE | SSH_FXF.APPEND | SSH_FXF.CREAT,
	'r+': SSH_FXF.READ | SSH_FXF.WRITE,
	'w+': SSH_FXF.READ | SSH_FXF.WRITE | SSH_FXF.TRUNC | SSH_FXF.CREAT,
	'a+': SSH_FXF.READ | SSH_FXF.WRITE | SSH_FXF.APPEND | SSH_FXF.CREAT,
}

# open flags for protocol versions 5+, the lowest 3 bits hold the disposition
class SSH_FXF_ACCESS(enum.IntEnum):
	CREATE_NEW = 0x00000000
	CREATE_TRUNCATE = 0x00000001
	OPEN_EXISTING = 0x00000002
	OPEN_OR_CREATE = 0x00000003
	TRUNCATE_EXISTING = 0x00000004

SSH_FXF_ACCESS_DISPOSITION = 0x00000007

class SSH_FXF_V5(enum.IntFlag):
	APPEND_DATA = 0x00000008
	APPEND_DATA_ATOMIC = 0x00000010
	TEXT_MODE = 0x00000020
	BLOCK_READ = 0x00000040
	BLOCK_WRITE = 0x00000080
	BLOCK_DELETE = 0x00000100
	BLOCK_ADVISORY = 0x00000200
	NOFOLLOW = 0x00000400
	DELETE_ON_CLOSE = 0x00000800

class ACE4(enum.IntFlag):
	READ_DATA = 0x00000001
	WRITE_DATA = 0x00000002
	APPEND_DATA = 0x00000004
	READ_NAMED_ATTRS = 0x00000008
	WRITE_NAMED_ATTRS = 0x00000010
	EXECUTE = 0x00000020
	DELETE_CHILD = 0x00000040
	READ_ATTRIBUTES = 0x00000080
	WRITE_ATTRIBUTES = 0x00000100
	DELETE = 0x00010000
	READ_ACL = 0x00020000
	WRITE_ACL = 0x00040000
	WRITE_OWNER = 0x00080000
	SYNCHRONIZE = 0x00100000

class SSH_FXR(enum.IntFlag):
	OVERWRITE = 0x00000001
	ATOMIC = 0x00000002
	NATIVE = 0x00000004

# attribute flags for protocol versions 1-3
class SSH_FILEXFER_ATTR(enum.IntFlag):
	SIZE = 0x00000001
	UIDGID = 0x00000002
	PERMISSIONS = 0x00000004
	ACMODTIME = 0x00000008
	EXTENDED = 0x80000000

# attribute flags for protocol versions 4+
class SSH_FILEXFER_ATTR_V4(enum.IntFlag):
	SIZE = 0x00000001
	PERMISSIONS = 0x00000004
	ACCESSTIME = 0x00000008
	CREATETIME = 0x00000010
	MODIFYTIME = 0x00000020
	ACL = 0x00000040
	OWNERGROUP = 0x00000080
	SUBSECOND_TIMES = 0x00000100
	BITS = 0x00000200
	ALLOCATION_SIZE = 0x00000400
	TEXT_HINT = 0x00000800
	MIME_TYPE = 0x00001000
	LINK_COUNT = 0x00002000
	UNTRANSLATED_NAME = 0x00004000
	CTIME = 0x00008000
	EXTENDED = 0x80000000

class SSH_FILEXFER_TYPE(enum.Enum):
	REGULAR = 1
	DIRECTORY = 2
	SYMLINK = 3
	SPECIAL = 4
	UNKNOWN = 5
	SOCKET = 6
	CHAR_DEVICE = 7
	BLOCK_DEVICE = 8
	FIFO = 9

# maps the S_IFMT part of a permission word to the v4+ type byte
PERMISSIONS_TO_FILEXFER_TYPE = {
	0o140000: SSH_FILEXFER_TYPE.SOCKET,
	0o120000: SSH_FILEXFER_TYPE.SYMLINK,
	0o100000: SSH_FILEXFER_TYPE.REGULAR,
	0o060000: SSH_FILEXFER_TYPE.BLOCK_DEVICE,
	0o040000: SSH_FILEXFER_TYPE.DIRECTORY,
	0o020000: SSH_FILEXFER_TYPE.CHAR_DEVICE,
	0o010000: SSH_FILEXFER_TYPE.FIFO,
}

class SSH_FILEXFER_TEXT_HINT(enum.Enum):
	KNOWN_TEXT = 0
	GUESSED_TEXT = 1
	KNOWN_BINARY = 2
	GUESSED_BINARY = 3

class SSH_FX(enum.Enum):
	OK = 0
	EOF = 1
	NO_SUCH_FILE = 2
	PERMISSION_DENIED = 3
	FAILURE = 4
	BAD_MESSAGE = 5
	NO_CONNECTION = 6
	CONNECTION_LOST = 7
	OP_UNSUPPORTED = 8
	INVALID_HANDLE = 9
	NO_SUCH_PATH = 10
	FILE_ALREADY_EXISTS = 11
	WRITE_PROTECT = 12
	NO_MEDIA = 13
	NO_SPACE_ON_FILESYSTEM = 14
	QUOTA_EXCEEDED = 15
	UNKNOWN_PRINCIPAL = 16
	LOCK_CONFLICT = 17
	DIR_NOT_EMPTY = 18
	NOT_A_DIRECTORY = 19
	INVALID_FILENAME = 20
	LINK_LOOP = 21
	CANNOT_DELETE = 22
	INVALID_PARAMETER = 23
	FILE_IS_A_DIRECTORY = 24
	BYTE_RANGE_LOCK_CONFLICT = 25
	BYTE_RANGE_LOCK_REFUSED = 26
	DELETE_PENDING = 27
	FILE_CORRUPT = 28
	OWNER_INVALID = 29
	GROUP_INVALID = 30
	NO_MATCHING_BYTE_RANGE_LOCK = 31

def to_status_code(code:int):
	"""Returns the SSH_FX member for code, or the raw integer if the code is not known"""
	try:
		return SSH_FX(code)
	except ValueError:
		return code
