from asysftp.protocol.buffer import SFTPBuffer, uint8, uint32, uint64, boolean, string
from asysftp.protocol.constants import SSH_FXP, SSH_FILEXFER_ATTR_V4, SSH_FILEXFER_TEXT_HINT
from asysftp.protocol.v05 import AttributesV5, SFTPProtocolV5


class AttributesV6(AttributesV5):
	"""Version 6 attributes.
	Adds allocation-size, ctime, attrib-bits-valid, text-hint, mime-type,
	link-count and untranslated-name. The acl blob starts with an acl-flags word.
	"""
	TIME_FIELDS = AttributesV5.TIME_FIELDS + [
		('ctime', SSH_FILEXFER_ATTR_V4.CTIME),
	]

	def init_extra(self, allocation_size:int = None, ctime:int = None, ctime_nseconds:int = None,
					attrib_bits_valid:int = None, text_hint = None, mime_type:str = None,
					link_count:int = None, untranslated_name:bytes = None, acl_flags:int = None, **kwargs):
		self.allocation_size = allocation_size
		self.ctime = ctime
		self.ctime_nseconds = ctime_nseconds
		self.attrib_bits_valid = attrib_bits_valid
		self.text_hint = text_hint
		self.mime_type = mime_type
		self.link_count = link_count
		self.untranslated_name = untranslated_name
		self.acl_flags = acl_flags
		super().init_extra(**kwargs)

	def extra_flags(self):
		flags = super().extra_flags()
		if self.allocation_size is not None:
			flags |= SSH_FILEXFER_ATTR_V4.ALLOCATION_SIZE
		if self.text_hint is not None:
			flags |= SSH_FILEXFER_ATTR_V4.TEXT_HINT
		if self.mime_type is not None:
			flags |= SSH_FILEXFER_ATTR_V4.MIME_TYPE
		if self.link_count is not None:
			flags |= SSH_FILEXFER_ATTR_V4.LINK_COUNT
		if self.untranslated_name is not None:
			flags |= SSH_FILEXFER_ATTR_V4.UNTRANSLATED_NAME
		return flags

	def read_after_size(self, buff:SFTPBuffer, flags:SSH_FILEXFER_ATTR_V4):
		if flags & SSH_FILEXFER_ATTR_V4.ALLOCATION_SIZE:
			self.allocation_size = buff.read_uint64()

	def write_after_size(self, flags:SSH_FILEXFER_ATTR_V4) -> bytes:
		if flags & SSH_FILEXFER_ATTR_V4.ALLOCATION_SIZE:
			return uint64(self.allocation_size)
		return b''

	def read_acl(self, buff:SFTPBuffer):
		self.acl_flags = buff.read_uint32()
		super().read_acl(buff)

	def write_acl(self) -> bytes:
		return uint32(self.acl_flags if self.acl_flags is not None else 0) + super().write_acl()

	def read_after_acl(self, buff:SFTPBuffer, flags:SSH_FILEXFER_ATTR_V4):
		if flags & SSH_FILEXFER_ATTR_V4.BITS:
			self.attrib_bits = buff.read_uint32()
			self.attrib_bits_valid = buff.read_uint32()
		if flags & SSH_FILEXFER_ATTR_V4.TEXT_HINT:
			hint = buff.read_uint8()
			try:
				self.text_hint = SSH_FILEXFER_TEXT_HINT(hint)
			except ValueError:
				self.text_hint = hint
		if flags & SSH_FILEXFER_ATTR_V4.MIME_TYPE:
			self.mime_type = buff.read_str()
		if flags & SSH_FILEXFER_ATTR_V4.LINK_COUNT:
			self.link_count = buff.read_uint32()
		if flags & SSH_FILEXFER_ATTR_V4.UNTRANSLATED_NAME:
			self.untranslated_name = buff.read_string()

	def write_after_acl(self, flags:SSH_FILEXFER_ATTR_V4) -> bytes:
		t = b''
		if flags & SSH_FILEXFER_ATTR_V4.BITS:
			t += uint32(self.attrib_bits)
			# all bits are meaningful unless told otherwise
			t += uint32(self.attrib_bits_valid if self.attrib_bits_valid is not None else 0xffffffff)
		if flags & SSH_FILEXFER_ATTR_V4.TEXT_HINT:
			t += uint8(getattr(self.text_hint, 'value', self.text_hint))
		if flags & SSH_FILEXFER_ATTR_V4.MIME_TYPE:
			t += string(self.mime_type)
		if flags & SSH_FILEXFER_ATTR_V4.LINK_COUNT:
			t += uint32(self.link_count)
		if flags & SSH_FILEXFER_ATTR_V4.UNTRANSLATED_NAME:
			t += string(self.untranslated_name)
		return t

	def to_dict(self):
		d = super().to_dict()
		d.update({
			'allocation_size' : self.allocation_size,
			'attrib_bits_valid' : self.attrib_bits_valid,
			'text_hint' : self.text_hint,
			'mime_type' : self.mime_type,
			'link_count' : self.link_count,
			'untranslated_name' : self.untranslated_name,
			'acl_flags' : self.acl_flags,
		})
		return d


class SFTPProtocolV6(SFTPProtocolV5):
	version = 6
	attribute_factory = AttributesV6
	DEFAULT_STAT_FLAGS = SFTPProtocolV5.DEFAULT_STAT_FLAGS | SSH_FILEXFER_ATTR_V4.ALLOCATION_SIZE | \
		SSH_FILEXFER_ATTR_V4.TEXT_HINT | SSH_FILEXFER_ATTR_V4.MIME_TYPE | \
		SSH_FILEXFER_ATTR_V4.LINK_COUNT | SSH_FILEXFER_ATTR_V4.UNTRANSLATED_NAME | \
		SSH_FILEXFER_ATTR_V4.CTIME

	def link(self, newpath:str, existingpath:str, symlink:bool):
		return self.request(SSH_FXP.LINK, string(newpath), string(existingpath), boolean(symlink))

	def symlink(self, linkpath:str, targetpath:str):
		"""SYMLINK was replaced by LINK in version 6"""
		return self.link(linkpath, targetpath, True)

	def block(self, handle:bytes, offset:int, length:int, mask:int):
		return self.request(SSH_FXP.BLOCK, string(handle), uint64(offset), uint64(length), uint32(mask))

	def unblock(self, handle:bytes, offset:int, length:int):
		return self.request(SSH_FXP.UNBLOCK, string(handle), uint64(offset), uint64(length))
