import os
from typing import Tuple
from asysftp.common.resolver import SFTPOwnerResolver
from asysftp.protocol.buffer import uint32
from asysftp.protocol.constants import SSH_FXP, SSH_FXF, PY_OPEN_TO_SSH_FXF
from asysftp.protocol.errors import SFTPUnsupportedError

def open_flags_to_fxf(flags) -> SSH_FXF:
	"""Accepts SSH_FXF flags, a python open() mode string or os.O_* bits"""
	if isinstance(flags, SSH_FXF):
		return flags

	if isinstance(flags, str):
		if 't' in flags:
			raise ValueError('Text mode not supported!')
		mode = flags.replace('b', '')
		if mode not in PY_OPEN_TO_SSH_FXF:
			raise ValueError('Invalid mode %s' % flags)
		return PY_OPEN_TO_SSH_FXF[mode]

	access = flags & (os.O_RDONLY | os.O_WRONLY | os.O_RDWR)
	if access == os.O_WRONLY:
		fxf = SSH_FXF.WRITE
	elif access == os.O_RDWR:
		fxf = SSH_FXF.READ | SSH_FXF.WRITE
	else:
		fxf = SSH_FXF.READ

	if flags & os.O_APPEND:
		fxf |= SSH_FXF.APPEND
	if flags & os.O_CREAT:
		fxf |= SSH_FXF.CREAT
	if flags & os.O_TRUNC:
		fxf |= SSH_FXF.TRUNC
	if flags & os.O_EXCL:
		fxf |= SSH_FXF.EXCL
	return fxf


class SFTPProtocol:
	"""Request encoders and response parsers for one protocol version.
	Every request method returns (request id, packet type, payload) where the
	payload already starts with the request id. Parsers receive the packet with
	its buffer positioned right after the request id.
	"""
	version:int = None
	attribute_factory = None

	def __init__(self, session, resolver:SFTPOwnerResolver = None):
		self.session = session
		self.resolver = resolver if resolver is not None else SFTPOwnerResolver()
		self.__next_id = 0

	def next_request_id(self) -> int:
		"""Returns the next request id that is not currently pending"""
		pending = self.session.pending_requests
		while True:
			self.__next_id += 1
			self.__next_id &= 0xffffffff
			if pending is None or self.__next_id not in pending:
				break
		return self.__next_id

	def request(self, ptype:SSH_FXP, *fields:bytes) -> Tuple[int, SSH_FXP, bytes]:
		reqid = self.next_request_id()
		return reqid, ptype, uint32(reqid) + b''.join(fields)

	def build_attributes(self, attrs = None):
		if attrs is None:
			return self.attribute_factory(resolver = self.resolver)
		if isinstance(attrs, dict):
			return self.attribute_factory.from_dict(attrs, resolver = self.resolver)
		if isinstance(attrs, self.attribute_factory):
			return attrs
		raise TypeError('Expected dict or %s, got %s' % (self.attribute_factory.__name__, type(attrs).__name__))

	def unsupported(self, name:str):
		raise SFTPUnsupportedError('The %s operation is not available in SFTP protocol version %s' % (name, self.version))

	def rename(self, oldpath:str, newpath:str, flags:int = None):
		self.unsupported('rename')

	def readlink(self, path:str):
		self.unsupported('readlink')

	def symlink(self, linkpath:str, targetpath:str):
		self.unsupported('symlink')

	def link(self, newpath:str, existingpath:str, symlink:bool):
		self.unsupported('link')

	def block(self, handle:bytes, offset:int, length:int, mask:int):
		self.unsupported('block')

	def unblock(self, handle:bytes, offset:int, length:int):
		self.unsupported('unblock')

	def __str__(self):
		return '<%s version=%s>' % (self.__class__.__name__, self.version)
