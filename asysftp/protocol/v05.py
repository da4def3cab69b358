from asysftp.protocol.base import open_flags_to_fxf
from asysftp.protocol.buffer import SFTPBuffer, uint32, string
from asysftp.protocol.constants import SSH_FXP, SSH_FXF, SSH_FXF_ACCESS, SSH_FXF_V5, ACE4, \
	SSH_FILEXFER_ATTR_V4
from asysftp.protocol.v04 import AttributesV4, SFTPProtocolV4


def fxf_to_v5(pflags:SSH_FXF):
	"""Converts version 1-4 open flags to the (desired-access, flags) pair of version 5+"""
	access = ACE4(0)
	if pflags & SSH_FXF.READ:
		access |= ACE4.READ_DATA | ACE4.READ_ATTRIBUTES
	if pflags & SSH_FXF.WRITE:
		access |= ACE4.WRITE_DATA | ACE4.WRITE_ATTRIBUTES
	if pflags & SSH_FXF.APPEND:
		access |= ACE4.APPEND_DATA

	if pflags & SSH_FXF.CREAT and pflags & SSH_FXF.EXCL:
		disposition = SSH_FXF_ACCESS.CREATE_NEW
	elif pflags & SSH_FXF.CREAT and pflags & SSH_FXF.TRUNC:
		disposition = SSH_FXF_ACCESS.CREATE_TRUNCATE
	elif pflags & SSH_FXF.CREAT:
		disposition = SSH_FXF_ACCESS.OPEN_OR_CREATE
	elif pflags & SSH_FXF.TRUNC:
		disposition = SSH_FXF_ACCESS.TRUNCATE_EXISTING
	else:
		disposition = SSH_FXF_ACCESS.OPEN_EXISTING

	flags = int(disposition)
	if pflags & SSH_FXF.APPEND:
		flags |= SSH_FXF_V5.APPEND_DATA
	return access, flags


class AttributesV5(AttributesV4):
	"""Version 4 attributes plus the attrib-bits word"""
	def init_extra(self, attrib_bits:int = None, **kwargs):
		self.attrib_bits = attrib_bits
		super().init_extra(**kwargs)

	def extra_flags(self):
		flags = super().extra_flags()
		if self.attrib_bits is not None:
			flags |= SSH_FILEXFER_ATTR_V4.BITS
		return flags

	def read_after_acl(self, buff:SFTPBuffer, flags:SSH_FILEXFER_ATTR_V4):
		if flags & SSH_FILEXFER_ATTR_V4.BITS:
			self.attrib_bits = buff.read_uint32()

	def write_after_acl(self, flags:SSH_FILEXFER_ATTR_V4) -> bytes:
		if flags & SSH_FILEXFER_ATTR_V4.BITS:
			return uint32(self.attrib_bits)
		return b''

	def to_dict(self):
		d = super().to_dict()
		d['attrib_bits'] = self.attrib_bits
		return d


class SFTPProtocolV5(SFTPProtocolV4):
	version = 5
	attribute_factory = AttributesV5
	DEFAULT_STAT_FLAGS = SFTPProtocolV4.DEFAULT_STAT_FLAGS | SSH_FILEXFER_ATTR_V4.BITS

	def open(self, path:str, flags, attrs = None):
		access, v5flags = fxf_to_v5(open_flags_to_fxf(flags))
		return self.request(SSH_FXP.OPEN, string(path), uint32(access), uint32(v5flags), self.build_attributes(attrs).to_bytes())

	def rename(self, oldpath:str, newpath:str, flags:int = None):
		return self.request(SSH_FXP.RENAME, string(oldpath), string(newpath), uint32(flags if flags is not None else 0))
