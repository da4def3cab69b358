from asysftp.protocol.buffer import SFTPBuffer
from asysftp.protocol.packet import SFTPPacket
from asysftp.protocol.errors import SFTPProtocolError


class SFTPPacketizer:
	"""Cuts a byte stream into SFTP packets.
	Bytes can arrive in any chunking, a frame may span several deliveries
	and one delivery may carry several frames.
	"""
	def __init__(self, init_buffer = b''):
		self.in_buffer = SFTPBuffer(init_buffer)
		self.packet_length = None

	def feed(self, data:bytes):
		if data:
			self.in_buffer.append(data)

	def process_buffer(self):
		"""Yields every complete packet in the buffer, incomplete trailing data stays buffered"""
		while self.in_buffer.length > 0:
			if self.packet_length is None:
				if self.in_buffer.length < 4:
					return
				self.packet_length = self.in_buffer.read_uint32()
				self.in_buffer.consume()
				if self.packet_length == 0:
					raise SFTPProtocolError('Received an SFTP packet with zero length')

			if self.in_buffer.length < self.packet_length:
				return

			packet = SFTPPacket(self.in_buffer.read(self.packet_length))
			self.in_buffer.consume()
			self.packet_length = None
			yield packet
