from asysftp.protocol.buffer import SFTPBuffer
from asysftp.protocol.constants import SSH_FXP
from asysftp.protocol.errors import SFTPProtocolError


class SFTPPacket:
	"""One SFTP message without its length prefix.
	type is an SSH_FXP member, or the raw tag value if the tag is unknown.
	The buffer is positioned at the first type-specific field.
	"""
	def __init__(self, data:bytes):
		if len(data) == 0:
			raise SFTPProtocolError('Received an empty SFTP packet')
		self.length = len(data)
		try:
			self.type = SSH_FXP(data[0])
		except ValueError:
			self.type = data[0]
		self.buffer = SFTPBuffer(data[1:])

	def eof(self):
		return self.buffer.eof()

	def read_uint32(self):
		return self.buffer.read_uint32()

	def read_string(self):
		return self.buffer.read_string()

	def __str__(self):
		return '<SFTPPacket type=%s length=%s>' % (self.type, self.length)


def frame_packet(ptype:SSH_FXP, payload:bytes) -> bytes:
	"""length(type + payload) + type + payload"""
	return (len(payload) + 1).to_bytes(4, byteorder='big', signed = False) + \
		ptype.value.to_bytes(1, byteorder='big', signed = False) + \
		payload
