from asysftp.protocol.buffer import string
from asysftp.protocol.constants import SSH_FXP
from asysftp.protocol.v01 import SFTPProtocolV1


class SFTPProtocolV2(SFTPProtocolV1):
	version = 2

	def rename(self, oldpath:str, newpath:str, flags:int = None):
		"""flags are not supported before version 5 and are ignored"""
		return self.request(SSH_FXP.RENAME, string(oldpath), string(newpath))
