from asysftp.protocol.constants import SSH_FX
from asysftp.protocol.errors import SFTPStatusError


class SFTPResponse:
	"""What a request's future resolves to.
	Status responses carry code/message/language, every other response type
	is an OK response with the parsed payload in data.
	"""
	def __init__(self, reqid:int, code = SSH_FX.OK, message:str = None, language:str = None, data = None):
		self.id = reqid
		self.code = code
		self.message = message
		self.language = language
		self.data = data

	@staticmethod
	def ok(reqid:int, data = None):
		return SFTPResponse(reqid, SSH_FX.OK, data = data)

	@property
	def is_ok(self):
		return self.code == SSH_FX.OK

	@property
	def is_eof(self):
		return self.code == SSH_FX.EOF

	def get_exception(self):
		return SFTPStatusError(self.code, self.message)

	def __str__(self):
		return '<SFTPResponse id=%s code=%s message=%s>' % (self.id, self.code, self.message)


class SFTPName:
	"""One entry of a NAME response. longname only exists up to protocol version 3"""
	def __init__(self, filename:str, longname:str = None, attrs = None):
		self.filename = filename
		self.longname = longname
		self.attrs = attrs

	def __iter__(self):
		return iter((self.filename, self.longname, self.attrs))

	def __str__(self):
		return '<SFTPName filename=%s>' % self.filename
