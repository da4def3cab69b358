from asysftp.protocol.v01 import SFTPProtocolV1
from asysftp.protocol.v02 import SFTPProtocolV2
from asysftp.protocol.v03 import SFTPProtocolV3
from asysftp.protocol.v04 import SFTPProtocolV4
from asysftp.protocol.v05 import SFTPProtocolV5
from asysftp.protocol.v06 import SFTPProtocolV6
from asysftp.protocol.errors import SFTPProtocolError

SFTP_PROTOCOLS = {
	1: SFTPProtocolV1,
	2: SFTPProtocolV2,
	3: SFTPProtocolV3,
	4: SFTPProtocolV4,
	5: SFTPProtocolV5,
	6: SFTPProtocolV6,
}

def load_protocol(session, version:int, resolver = None):
	"""Returns the protocol implementation for the negotiated version"""
	if version not in SFTP_PROTOCOLS:
		raise SFTPProtocolError('Unsupported SFTP protocol version %s' % version)
	return SFTP_PROTOCOLS[version](session, resolver = resolver)
