
class SFTPException(Exception):
	"""Base class for every error raised by asysftp"""
	pass

class SFTPBufferError(SFTPException):
	"""Raised when a read runs past the end of the available data"""
	pass

class SFTPProtocolError(SFTPException):
	"""The peer violated the protocol. The session cannot continue after this."""
	pass

class SFTPSubsystemError(SFTPException):
	"""The transport could not start the sftp subsystem"""
	pass

class SFTPSessionError(SFTPException):
	"""An operation was attempted on a session that is not open"""
	pass

class SFTPUnsupportedError(SFTPException):
	"""The operation does not exist in the negotiated protocol version"""
	pass

class SFTPChannelError(SFTPException):
	pass

class SFTPStatusError(SFTPException):
	def __init__(self, error_code, msg = None):
		self.error_code = getattr(error_code, 'value', error_code)
		self.error_code_name = getattr(error_code, 'name', str(error_code))
		self.message = msg
		super().__init__(self.error_code, self.message)

	def __str__(self):
		if self.message:
			return 'SFTP error %s: %s' % (self.error_code_name, self.message)
		return 'SFTP error %s' % self.error_code_name
