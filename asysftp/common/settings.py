from asysftp.common.resolver import SFTPOwnerResolver
from asysftp.protocol.constants import SFTP_HIGHEST_PROTOCOL_VERSION

class SFTPSessionSettings:
	def __init__(self):
		self.highest_version:int = SFTP_HIGHEST_PROTOCOL_VERSION
		self.subsystem:str = 'sftp'
		self.resolver:SFTPOwnerResolver = SFTPOwnerResolver()
		self.max_read_size:int = 32768
