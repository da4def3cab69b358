import asyncio
import pytest

from asysftp.client import SFTPClient
from asysftp.common.settings import SFTPSessionSettings
from asysftp.protocol.constants import SSH_FXP
from asysftp.protocol.errors import SFTPStatusError, SFTPUnsupportedError, SFTPChannelError
from asysftp.protocol.v01 import AttributesV1

from tests.fakes import FakeChannel, version_packet, status_packet, handle_packet, data_packet, \
	name_packet, attrs_packet

CONTENT = b'0123456789abcdef!'


class FakeServer:
	"""Answers requests from a tiny in-memory file tree"""
	def __init__(self, version:int = 3):
		self.version = version
		self.writes = []
		self.readdir_calls = 0
		self.channel = FakeChannel(responder = self.respond)

	def respond(self, packet):
		if packet.type == SSH_FXP.INIT:
			return version_packet(self.version, [('posix-rename@openssh.com', b'1')])

		reqid = packet.read_uint32()
		buff = packet.buffer
		if packet.type in (SSH_FXP.OPEN, SSH_FXP.OPENDIR):
			path = buff.read_str()
			if path == '/missing':
				return status_packet(reqid, 2, 'No such file', 'en')
			return handle_packet(reqid, path.encode())
		if packet.type == SSH_FXP.READ:
			buff.read_string()
			offset = buff.read_uint64()
			length = buff.read_uint32()
			if offset >= len(CONTENT):
				return status_packet(reqid, 1, 'End of file', 'en')
			return data_packet(reqid, CONTENT[offset:offset+length])
		if packet.type == SSH_FXP.WRITE:
			buff.read_string()
			self.writes.append((buff.read_uint64(), buff.read_string()))
			return status_packet(reqid, 0, 'Success', 'en')
		if packet.type == SSH_FXP.READDIR:
			self.readdir_calls += 1
			if self.readdir_calls > 1:
				return status_packet(reqid, 1, 'End of file', 'en')
			return name_packet(reqid, [
				('.', 'drwxr-xr-x .', AttributesV1(permissions = 0o40755)),
				('a.txt', '-rw-r--r-- a.txt', AttributesV1(size = 17, permissions = 0o100644)),
			])
		if packet.type in (SSH_FXP.STAT, SSH_FXP.LSTAT, SSH_FXP.FSTAT):
			return attrs_packet(reqid, AttributesV1(size = len(CONTENT), permissions = 0o100644))
		if packet.type in (SSH_FXP.REALPATH, SSH_FXP.READLINK):
			return name_packet(reqid, [('/home/alice', '/home/alice', AttributesV1())])
		if packet.type == SSH_FXP.REMOVE:
			if buff.read_str() == '/busy':
				# never answered, the channel goes away instead
				asyncio.ensure_future(self.channel.close())
				return None
			return status_packet(reqid, 3, 'Permission denied', 'en')
		return status_packet(reqid, 0, 'Success', 'en')


async def connect(version:int = 3, max_read_size:int = None):
	server = FakeServer(version)
	settings = SFTPSessionSettings()
	if max_read_size is not None:
		settings.max_read_size = max_read_size
	client, err = await SFTPClient.from_channel(server.channel, settings = settings)
	assert err is None
	return client, server


@pytest.mark.asyncio
async def test_from_channel():
	client, _ = await connect(3)
	assert client.version == 3
	assert client.extensions == {'posix-rename@openssh.com' : b'1'}

@pytest.mark.asyncio
async def test_from_channel_subsystem_failure():
	client, err = await SFTPClient.from_channel(FakeChannel(subsystem_ok = False))
	assert client is None
	assert err is not None

@pytest.mark.asyncio
async def test_open_and_read_all():
	client, _ = await connect(3, max_read_size = 4)
	handle, err = await client.open('/data.bin')
	assert err is None
	assert handle == b'/data.bin'
	data, err = await client.read_all(handle)
	assert err is None
	assert data == CONTENT

@pytest.mark.asyncio
async def test_read_at_eof_returns_empty():
	client, _ = await connect(3)
	data, err = await client.read(b'h', 1000, 10)
	assert (data, err) == (b'', None)

@pytest.mark.asyncio
async def test_open_missing_file():
	client, _ = await connect(3)
	handle, err = await client.open('/missing')
	assert handle is None
	assert isinstance(err, SFTPStatusError)
	assert err.error_code == 2
	assert err.message == 'No such file'

@pytest.mark.asyncio
async def test_status_error():
	client, _ = await connect(3)
	res, err = await client.remove('/etc/passwd')
	assert res is None
	assert isinstance(err, SFTPStatusError)
	assert err.error_code_name == 'PERMISSION_DENIED'

@pytest.mark.asyncio
async def test_write_is_chunked():
	client, server = await connect(3, max_read_size = 4)
	res, err = await client.write(b'h', 100, b'abcdefghij')
	assert (res, err) == (True, None)
	assert server.writes == [(100, b'abcd'), (104, b'efgh'), (108, b'ij')]

@pytest.mark.asyncio
async def test_stat():
	client, _ = await connect(3)
	attrs, err = await client.stat('/data.bin')
	assert err is None
	assert attrs.size == len(CONTENT)
	assert attrs.is_file is True

@pytest.mark.asyncio
async def test_listdir():
	client, server = await connect(3)
	entries, err = await client.listdir('/home')
	assert err is None
	assert [e.filename for e in entries] == ['.', 'a.txt']
	assert entries[1].attrs.size == 17
	assert server.readdir_calls == 2

@pytest.mark.asyncio
async def test_realpath_and_readlink():
	client, _ = await connect(3)
	assert await client.realpath('.') == ('/home/alice', None)
	assert await client.readlink('/link') == ('/home/alice', None)

@pytest.mark.asyncio
async def test_unsupported_in_negotiated_version():
	client, _ = await connect(2)
	res, err = await client.readlink('/link')
	assert res is None
	assert isinstance(err, SFTPUnsupportedError)

@pytest.mark.asyncio
async def test_simple_status_operations():
	client, _ = await connect(6)
	assert await client.mkdir('/d', {'permissions' : 0o40700}) == (True, None)
	assert await client.rmdir('/d') == (True, None)
	assert await client.rename('/a', '/b') == (True, None)
	assert await client.symlink('/l', '/t') == (True, None)
	assert await client.link('/n', '/e') == (True, None)
	assert await client.block(b'h', 0, 10, 0x40) == (True, None)
	assert await client.unblock(b'h', 0, 10) == (True, None)
	assert await client.close_handle(b'h') == (True, None)

@pytest.mark.asyncio
async def test_channel_closed_while_waiting():
	client, _ = await connect(3)
	res, err = await asyncio.wait_for(client.remove('/busy'), 1)
	assert res is None
	assert isinstance(err, SFTPChannelError)

@pytest.mark.asyncio
async def test_download_upload(tmp_path):
	client, server = await connect(3, max_read_size = 5)
	dst = tmp_path / 'copy.bin'
	assert await client.download('/data.bin', str(dst)) == (True, None)
	assert dst.read_bytes() == CONTENT

	src = tmp_path / 'up.bin'
	src.write_bytes(b'hello world')
	assert await client.upload(str(src), '/up.bin') == (True, None)
	assert b''.join(data for _, data in server.writes) == b'hello world'
