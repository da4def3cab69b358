from asysftp.protocol.buffer import string
from asysftp.protocol.constants import SSH_FXP, to_status_code
from asysftp.protocol.v02 import SFTPProtocolV2


class SFTPProtocolV3(SFTPProtocolV2):
	version = 3

	def readlink(self, path:str):
		return self.request(SSH_FXP.READLINK, string(path))

	def symlink(self, linkpath:str, targetpath:str):
		return self.request(SSH_FXP.SYMLINK, string(linkpath), string(targetpath))

	def parse_status(self, packet):
		buff = packet.buffer
		code = to_status_code(buff.read_uint32())
		message = None
		language = None
		# some servers stop after the code
		if not buff.eof():
			message = buff.read_str()
		if not buff.eof():
			language = buff.read_str()
		return code, message, language
