from typing import List, Tuple
from asysftp.common.resolver import SFTPOwnerResolver
from asysftp.protocol.base import SFTPProtocol, open_flags_to_fxf
from asysftp.protocol.buffer import SFTPBuffer, uint32, uint64, string
from asysftp.protocol.constants import SSH_FXP, SSH_FILEXFER_ATTR, to_status_code
from asysftp.protocol.response import SFTPName


def check_pair(name1:str, value1, name2:str, value2):
	if (value1 is None) != (value2 is None):
		raise ValueError('%s and %s must be set together' % (name1, name2))


class AttributesV1:
	"""File attributes as encoded by protocol versions 1-3.
	Unset fields are None, which is not the same as 0.
	owner/group names are resolved to uid/gid when the object is built.
	"""
	def __init__(self, size:int = None, uid:int = None, gid:int = None, permissions:int = None,
					atime:int = None, mtime:int = None, extended:List[Tuple[bytes, bytes]] = None,
					owner:str = None, group:str = None, resolver:SFTPOwnerResolver = None):
		if owner is not None or group is not None:
			if resolver is None:
				resolver = SFTPOwnerResolver()
			if owner is not None:
				uid = resolver.owner_to_uid(owner)
			if group is not None:
				gid = resolver.group_to_gid(group)

		check_pair('uid', uid, 'gid', gid)
		check_pair('atime', atime, 'mtime', mtime)

		self.size = size
		self.uid = uid
		self.gid = gid
		self.permissions = permissions
		self.atime = atime
		self.mtime = mtime
		self.extended = list(extended) if extended is not None else None

	@classmethod
	def from_dict(cls, d:dict, resolver:SFTPOwnerResolver = None):
		return cls(resolver = resolver, **d)

	@property
	def flags(self) -> SSH_FILEXFER_ATTR:
		flags = SSH_FILEXFER_ATTR(0)
		if self.size is not None:
			flags |= SSH_FILEXFER_ATTR.SIZE
		if self.uid is not None and self.gid is not None:
			flags |= SSH_FILEXFER_ATTR.UIDGID
		if self.permissions is not None:
			flags |= SSH_FILEXFER_ATTR.PERMISSIONS
		if self.atime is not None and self.mtime is not None:
			flags |= SSH_FILEXFER_ATTR.ACMODTIME
		if self.extended is not None:
			flags |= SSH_FILEXFER_ATTR.EXTENDED
		return flags

	@property
	def ftype(self):
		if self.permissions is None:
			return None
		return (self.permissions & 0o170000) >> 12

	@property
	def is_dir(self):
		return self.ftype == 0o4

	@property
	def is_file(self):
		return self.ftype == 0o10

	@property
	def is_link(self):
		return self.ftype == 0o12

	@classmethod
	def from_bytes(cls, data:bytes):
		return cls.from_buffer(SFTPBuffer(data))

	@classmethod
	def from_buffer(cls, buff:SFTPBuffer):
		attrs = cls()
		flags = SSH_FILEXFER_ATTR(buff.read_uint32())
		if flags & SSH_FILEXFER_ATTR.SIZE:
			attrs.size = buff.read_uint64()
		if flags & SSH_FILEXFER_ATTR.UIDGID:
			attrs.uid = buff.read_uint32()
			attrs.gid = buff.read_uint32()
		if flags & SSH_FILEXFER_ATTR.PERMISSIONS:
			attrs.permissions = buff.read_uint32()
		if flags & SSH_FILEXFER_ATTR.ACMODTIME:
			attrs.atime = buff.read_uint32()
			attrs.mtime = buff.read_uint32()
		if flags & SSH_FILEXFER_ATTR.EXTENDED:
			attrs.extended = read_extended(buff)
		return attrs

	def to_bytes(self) -> bytes:
		check_pair('uid', self.uid, 'gid', self.gid)
		check_pair('atime', self.atime, 'mtime', self.mtime)

		flags = self.flags
		t  = uint32(flags)
		if flags & SSH_FILEXFER_ATTR.SIZE:
			t += uint64(self.size)
		if flags & SSH_FILEXFER_ATTR.UIDGID:
			t += uint32(self.uid)
			t += uint32(self.gid)
		if flags & SSH_FILEXFER_ATTR.PERMISSIONS:
			t += uint32(self.permissions)
		if flags & SSH_FILEXFER_ATTR.ACMODTIME:
			t += uint32(self.atime)
			t += uint32(self.mtime)
		if flags & SSH_FILEXFER_ATTR.EXTENDED:
			t += write_extended(self.extended)
		return t

	def to_dict(self):
		return {
			'size' : self.size,
			'uid' : self.uid,
			'gid' : self.gid,
			'permissions' : self.permissions,
			'atime' : self.atime,
			'mtime' : self.mtime,
			'extended' : self.extended,
		}

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


def read_extended(buff:SFTPBuffer):
	extended = []
	for _ in range(buff.read_uint32()):
		etype = buff.read_string()
		edata = buff.read_string()
		extended.append((etype, edata))
	return extended

def write_extended(extended) -> bytes:
	t = uint32(len(extended))
	for etype, edata in extended:
		t += string(etype)
		t += string(edata)
	return t


class SFTPProtocolV1(SFTPProtocol):
	version = 1
	attribute_factory = AttributesV1

	def open(self, path:str, flags, attrs = None):
		pflags = open_flags_to_fxf(flags)
		return self.request(SSH_FXP.OPEN, string(path), uint32(pflags), self.build_attributes(attrs).to_bytes())

	def close(self, handle:bytes):
		return self.request(SSH_FXP.CLOSE, string(handle))

	def read(self, handle:bytes, offset:int, length:int):
		return self.request(SSH_FXP.READ, string(handle), uint64(offset), uint32(length))

	def write(self, handle:bytes, offset:int, data:bytes):
		return self.request(SSH_FXP.WRITE, string(handle), uint64(offset), string(data))

	def lstat(self, path:str, flags:int = None):
		return self.request(SSH_FXP.LSTAT, string(path))

	def fstat(self, handle:bytes, flags:int = None):
		return self.request(SSH_FXP.FSTAT, string(handle))

	def stat(self, path:str, flags:int = None):
		return self.request(SSH_FXP.STAT, string(path))

	def setstat(self, path:str, attrs):
		return self.request(SSH_FXP.SETSTAT, string(path), self.build_attributes(attrs).to_bytes())

	def fsetstat(self, handle:bytes, attrs):
		return self.request(SSH_FXP.FSETSTAT, string(handle), self.build_attributes(attrs).to_bytes())

	def opendir(self, path:str):
		return self.request(SSH_FXP.OPENDIR, string(path))

	def readdir(self, handle:bytes):
		return self.request(SSH_FXP.READDIR, string(handle))

	def remove(self, path:str):
		return self.request(SSH_FXP.REMOVE, string(path))

	def mkdir(self, path:str, attrs = None):
		return self.request(SSH_FXP.MKDIR, string(path), self.build_attributes(attrs).to_bytes())

	def rmdir(self, path:str):
		return self.request(SSH_FXP.RMDIR, string(path))

	def realpath(self, path:str):
		return self.request(SSH_FXP.REALPATH, string(path))

	def parse_status(self, packet):
		"""Version 1 and 2 status messages only carry the code"""
		return to_status_code(packet.buffer.read_uint32()), None, None

	def parse_handle(self, packet):
		return packet.buffer.read_string()

	def parse_data(self, packet):
		return packet.buffer.read_string()

	def parse_name(self, packet):
		buff = packet.buffer
		entries = []
		for _ in range(buff.read_uint32()):
			filename = buff.read_str()
			longname = buff.read_str()
			attrs = self.attribute_factory.from_buffer(buff)
			entries.append(SFTPName(filename, longname, attrs))
		return entries

	def parse_attrs(self, packet):
		return self.attribute_factory.from_buffer(packet.buffer)
