from asysftp.protocol.errors import SFTPBufferError


class SFTPBuffer:
	"""Growable byte buffer with a read position.
	All integers are big-endian, strings are uint32 length prefixed.
	Reading past the stored data raises SFTPBufferError instead of returning short data.
	"""
	def __init__(self, data:bytes = b''):
		self.data = bytearray(data)
		self.position = 0

	def __len__(self):
		return len(self.data) - self.position

	@property
	def length(self):
		"""Number of unread bytes"""
		return len(self.data) - self.position

	def eof(self):
		return self.position >= len(self.data)

	def append(self, data:bytes):
		self.data += data

	def consume(self):
		"""Drops everything that was already read"""
		if self.position > 0:
			del self.data[:self.position]
			self.position = 0

	def read(self, n:int) -> bytes:
		if n < 0 or n > self.length:
			raise SFTPBufferError('Attempted to read %s bytes but only %s are available' % (n, self.length))
		data = bytes(self.data[self.position:self.position + n])
		self.position += n
		return data

	def read_rest(self) -> bytes:
		return self.read(self.length)

	def read_uint8(self) -> int:
		return self.read(1)[0]

	def read_bool(self) -> bool:
		return self.read_uint8() != 0

	def read_uint32(self) -> int:
		return int.from_bytes(self.read(4), byteorder='big', signed = False)

	def read_uint64(self) -> int:
		return int.from_bytes(self.read(8), byteorder='big', signed = False)

	def read_int64(self) -> int:
		return int.from_bytes(self.read(8), byteorder='big', signed = True)

	def read_string(self) -> bytes:
		return self.read(self.read_uint32())

	def read_str(self, encoding:str = 'utf-8') -> str:
		"""Bytes that are not valid in encoding are kept as lone surrogates, string() writes them back unchanged"""
		return self.read_string().decode(encoding, 'surrogateescape')

	def __str__(self):
		return '<SFTPBuffer length=%s position=%s>' % (len(self.data), self.position)


def uint8(value:int) -> bytes:
	return value.to_bytes(1, byteorder='big', signed = False)

def boolean(value:bool) -> bytes:
	return b'\x01' if value else b'\x00'

def uint32(value:int) -> bytes:
	return int(value).to_bytes(4, byteorder='big', signed = False)

def uint64(value:int) -> bytes:
	return int(value).to_bytes(8, byteorder='big', signed = False)

def int64(value:int) -> bytes:
	return int(value).to_bytes(8, byteorder='big', signed = True)

def string(value) -> bytes:
	if isinstance(value, str):
		value = value.encode('utf-8', 'surrogateescape')
	return uint32(len(value)) + bytes(value)
