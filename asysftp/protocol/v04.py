from typing import List, Tuple
from asysftp.common.resolver import SFTPOwnerResolver
from asysftp.protocol.buffer import SFTPBuffer, uint8, uint32, uint64, int64, string
from asysftp.protocol.constants import SSH_FXP, SSH_FILEXFER_ATTR_V4, SSH_FILEXFER_TYPE, PERMISSIONS_TO_FILEXFER_TYPE
from asysftp.protocol.response import SFTPName
from asysftp.protocol.v01 import check_pair, read_extended, write_extended
from asysftp.protocol.v03 import SFTPProtocolV3


def to_filexfer_type(value:int):
	try:
		return SSH_FILEXFER_TYPE(value)
	except ValueError:
		return value


class ACE:
	def __init__(self, ace_type:int, ace_flag:int, ace_mask:int, who:str):
		self.ace_type = ace_type
		self.ace_flag = ace_flag
		self.ace_mask = ace_mask
		self.who = who

	@staticmethod
	def from_buffer(buff:SFTPBuffer):
		return ACE(buff.read_uint32(), buff.read_uint32(), buff.read_uint32(), buff.read_str())

	def to_bytes(self):
		return uint32(self.ace_type) + uint32(self.ace_flag) + uint32(self.ace_mask) + string(self.who)

	def __eq__(self, other):
		if not isinstance(other, ACE):
			return NotImplemented
		return (self.ace_type, self.ace_flag, self.ace_mask, self.who) == (other.ace_type, other.ace_flag, other.ace_mask, other.who)

	def __repr__(self):
		return '<ACE type=%s flag=%s mask=%s who=%s>' % (self.ace_type, self.ace_flag, self.ace_mask, self.who)


class AttributesV4:
	"""File attributes for protocol version 4.
	The file type byte is always present. Ownership travels as owner/group
	strings, numeric uid/gid given by the caller are turned into names.
	Times are signed 64 bit, with optional nanoseconds.
	"""
	TIME_FIELDS = [
		('atime', SSH_FILEXFER_ATTR_V4.ACCESSTIME),
		('createtime', SSH_FILEXFER_ATTR_V4.CREATETIME),
		('mtime', SSH_FILEXFER_ATTR_V4.MODIFYTIME),
	]

	def __init__(self, type = None, size:int = None, owner:str = None, group:str = None, permissions:int = None,
					atime:int = None, atime_nseconds:int = None, createtime:int = None, createtime_nseconds:int = None,
					mtime:int = None, mtime_nseconds:int = None, acl:List[ACE] = None,
					extended:List[Tuple[bytes, bytes]] = None, uid:int = None, gid:int = None,
					resolver:SFTPOwnerResolver = None, **kwargs):
		if uid is not None or gid is not None:
			if resolver is None:
				resolver = SFTPOwnerResolver()
			if uid is not None and owner is None:
				owner = resolver.uid_to_owner(uid)
			if gid is not None and group is None:
				group = resolver.gid_to_group(gid)
		check_pair('owner', owner, 'group', group)

		self.type = type
		self.size = size
		self.owner = owner
		self.group = group
		self.permissions = permissions
		self.atime = atime
		self.atime_nseconds = atime_nseconds
		self.createtime = createtime
		self.createtime_nseconds = createtime_nseconds
		self.mtime = mtime
		self.mtime_nseconds = mtime_nseconds
		self.acl = list(acl) if acl is not None else None
		self.extended = list(extended) if extended is not None else None
		self.init_extra(**kwargs)

	def init_extra(self, **kwargs):
		if len(kwargs) > 0:
			raise TypeError('Unexpected attributes for %s: %s' % (self.__class__.__name__, ', '.join(kwargs)))

	@classmethod
	def from_dict(cls, d:dict, resolver:SFTPOwnerResolver = None):
		return cls(resolver = resolver, **d)

	@property
	def file_type(self):
		if self.type is not None:
			return self.type
		if self.permissions is not None:
			return PERMISSIONS_TO_FILEXFER_TYPE.get(self.permissions & 0o170000, SSH_FILEXFER_TYPE.REGULAR)
		return SSH_FILEXFER_TYPE.REGULAR

	@property
	def is_dir(self):
		return self.file_type == SSH_FILEXFER_TYPE.DIRECTORY

	@property
	def is_file(self):
		return self.file_type == SSH_FILEXFER_TYPE.REGULAR

	@property
	def is_link(self):
		return self.file_type == SSH_FILEXFER_TYPE.SYMLINK

	def has_subsecond_times(self):
		for name, _ in self.TIME_FIELDS:
			if getattr(self, name) is not None and getattr(self, name + '_nseconds') is not None:
				return True
		return False

	@property
	def flags(self) -> SSH_FILEXFER_ATTR_V4:
		flags = SSH_FILEXFER_ATTR_V4(0)
		if self.size is not None:
			flags |= SSH_FILEXFER_ATTR_V4.SIZE
		if self.owner is not None and self.group is not None:
			flags |= SSH_FILEXFER_ATTR_V4.OWNERGROUP
		if self.permissions is not None:
			flags |= SSH_FILEXFER_ATTR_V4.PERMISSIONS
		for name, flag in self.TIME_FIELDS:
			if getattr(self, name) is not None:
				flags |= flag
		if self.has_subsecond_times():
			flags |= SSH_FILEXFER_ATTR_V4.SUBSECOND_TIMES
		if self.acl is not None:
			flags |= SSH_FILEXFER_ATTR_V4.ACL
		if self.extended is not None:
			flags |= SSH_FILEXFER_ATTR_V4.EXTENDED
		return flags | self.extra_flags()

	def extra_flags(self) -> SSH_FILEXFER_ATTR_V4:
		return SSH_FILEXFER_ATTR_V4(0)

	@classmethod
	def from_bytes(cls, data:bytes):
		return cls.from_buffer(SFTPBuffer(data))

	@classmethod
	def from_buffer(cls, buff:SFTPBuffer):
		attrs = cls()
		flags = SSH_FILEXFER_ATTR_V4(buff.read_uint32())
		attrs.type = to_filexfer_type(buff.read_uint8())
		if flags & SSH_FILEXFER_ATTR_V4.SIZE:
			attrs.size = buff.read_uint64()
		attrs.read_after_size(buff, flags)
		if flags & SSH_FILEXFER_ATTR_V4.OWNERGROUP:
			attrs.owner = buff.read_str()
			attrs.group = buff.read_str()
		if flags & SSH_FILEXFER_ATTR_V4.PERMISSIONS:
			attrs.permissions = buff.read_uint32()
		for name, flag in attrs.TIME_FIELDS:
			if flags & flag:
				setattr(attrs, name, buff.read_int64())
				if flags & SSH_FILEXFER_ATTR_V4.SUBSECOND_TIMES:
					setattr(attrs, name + '_nseconds', buff.read_uint32())
		if flags & SSH_FILEXFER_ATTR_V4.ACL:
			attrs.read_acl(SFTPBuffer(buff.read_string()))
		attrs.read_after_acl(buff, flags)
		if flags & SSH_FILEXFER_ATTR_V4.EXTENDED:
			attrs.extended = read_extended(buff)
		return attrs

	def read_after_size(self, buff:SFTPBuffer, flags:SSH_FILEXFER_ATTR_V4):
		pass

	def read_acl(self, buff:SFTPBuffer):
		self.acl = [ACE.from_buffer(buff) for _ in range(buff.read_uint32())]

	def read_after_acl(self, buff:SFTPBuffer, flags:SSH_FILEXFER_ATTR_V4):
		pass

	def to_bytes(self) -> bytes:
		check_pair('owner', self.owner, 'group', self.group)
		flags = self.flags
		t  = uint32(flags)
		t += uint8(getattr(self.file_type, 'value', self.file_type))
		if flags & SSH_FILEXFER_ATTR_V4.SIZE:
			t += uint64(self.size)
		t += self.write_after_size(flags)
		if flags & SSH_FILEXFER_ATTR_V4.OWNERGROUP:
			t += string(self.owner)
			t += string(self.group)
		if flags & SSH_FILEXFER_ATTR_V4.PERMISSIONS:
			t += uint32(self.permissions)
		for name, flag in self.TIME_FIELDS:
			if flags & flag:
				t += int64(getattr(self, name))
				if flags & SSH_FILEXFER_ATTR_V4.SUBSECOND_TIMES:
					nseconds = getattr(self, name + '_nseconds')
					t += uint32(nseconds if nseconds is not None else 0)
		if flags & SSH_FILEXFER_ATTR_V4.ACL:
			t += string(self.write_acl())
		t += self.write_after_acl(flags)
		if flags & SSH_FILEXFER_ATTR_V4.EXTENDED:
			t += write_extended(self.extended)
		return t

	def write_after_size(self, flags:SSH_FILEXFER_ATTR_V4) -> bytes:
		return b''

	def write_acl(self) -> bytes:
		return uint32(len(self.acl)) + b''.join([ace.to_bytes() for ace in self.acl])

	def write_after_acl(self, flags:SSH_FILEXFER_ATTR_V4) -> bytes:
		return b''

	def to_dict(self):
		d = {
			'type' : self.type,
			'size' : self.size,
			'owner' : self.owner,
			'group' : self.group,
			'permissions' : self.permissions,
			'acl' : self.acl,
			'extended' : self.extended,
		}
		for name, _ in self.TIME_FIELDS:
			d[name] = getattr(self, name)
			d[name + '_nseconds'] = getattr(self, name + '_nseconds')
		return d

	def __eq__(self, other):
		if type(other) is not type(self):
			return NotImplemented
		return self.to_dict() == other.to_dict()

	def __str__(self):
		t = '%s:\r\n' % self.__class__.__name__
		for k, v in self.to_dict().items():
			if v is not None:
				t += '%s: %s\r\n' % (k, v)
		return t


class SFTPProtocolV4(SFTPProtocolV3):
	version = 4
	attribute_factory = AttributesV4
	DEFAULT_STAT_FLAGS = SSH_FILEXFER_ATTR_V4.SIZE | SSH_FILEXFER_ATTR_V4.PERMISSIONS | \
		SSH_FILEXFER_ATTR_V4.ACCESSTIME | SSH_FILEXFER_ATTR_V4.CREATETIME | \
		SSH_FILEXFER_ATTR_V4.MODIFYTIME | SSH_FILEXFER_ATTR_V4.ACL | \
		SSH_FILEXFER_ATTR_V4.OWNERGROUP | SSH_FILEXFER_ATTR_V4.SUBSECOND_TIMES | \
		SSH_FILEXFER_ATTR_V4.EXTENDED

	def stat_flags(self, flags):
		return uint32(flags if flags is not None else self.DEFAULT_STAT_FLAGS)

	def lstat(self, path:str, flags:int = None):
		return self.request(SSH_FXP.LSTAT, string(path), self.stat_flags(flags))

	def fstat(self, handle:bytes, flags:int = None):
		return self.request(SSH_FXP.FSTAT, string(handle), self.stat_flags(flags))

	def stat(self, path:str, flags:int = None):
		return self.request(SSH_FXP.STAT, string(path), self.stat_flags(flags))

	def parse_name(self, packet):
		"""From version 4 on entries have no longname"""
		buff = packet.buffer
		entries = []
		for _ in range(buff.read_uint32()):
			filename = buff.read_str()
			attrs = self.attribute_factory.from_buffer(buff)
			entries.append(SFTPName(filename, None, attrs))
		return entries
