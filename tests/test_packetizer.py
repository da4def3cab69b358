import pytest

from asysftp.protocol.buffer import SFTPBuffer, uint32, uint64, int64, string
from asysftp.protocol.constants import SSH_FXP
from asysftp.protocol.errors import SFTPBufferError, SFTPProtocolError
from asysftp.protocol.packet import SFTPPacket, frame_packet
from asysftp.protocol.packetizer import SFTPPacketizer


def test_buffer_reads_big_endian():
	buff = SFTPBuffer(uint32(7) + uint64(2**40) + int64(-2) + string('héllo'))
	assert buff.read_uint32() == 7
	assert buff.read_uint64() == 2**40
	assert buff.read_int64() == -2
	assert buff.read_str() == 'héllo'
	assert buff.eof() is True

def test_buffer_read_past_end():
	buff = SFTPBuffer(b'\x00\x00\x00\x09abc')
	with pytest.raises(SFTPBufferError):
		buff.read_string()

def test_buffer_consume_drops_read_prefix():
	buff = SFTPBuffer(b'abcdef')
	buff.read(4)
	buff.consume()
	assert bytes(buff.data) == b'ef'
	assert buff.length == 2

def test_frame_packet_layout():
	assert frame_packet(SSH_FXP.INIT, uint32(6)) == b'\x00\x00\x00\x05\x01\x00\x00\x00\x06'

def test_packet_unknown_type_kept_as_int():
	packet = SFTPPacket(b'\xfa\x00')
	assert packet.type == 250
	assert packet.length == 2

def test_packet_empty():
	with pytest.raises(SFTPProtocolError):
		SFTPPacket(b'')

def test_fragmented_frames_byte_by_byte():
	stream = frame_packet(SSH_FXP.HANDLE, uint32(1) + string(b'h1')) + \
		frame_packet(SSH_FXP.DATA, uint32(2) + string(b'payload'))
	packetizer = SFTPPacketizer()
	packets = []
	for i in range(len(stream)):
		packetizer.feed(stream[i:i+1])
		packets.extend(packetizer.process_buffer())

	assert [p.type for p in packets] == [SSH_FXP.HANDLE, SSH_FXP.DATA]
	assert packets[1].read_uint32() == 2
	assert packets[1].read_string() == b'payload'
	assert packetizer.packet_length is None
	assert packetizer.in_buffer.length == 0

def test_length_is_cached_between_deliveries():
	frame = frame_packet(SSH_FXP.DATA, uint32(1) + string(b'xyz'))
	packetizer = SFTPPacketizer()
	packetizer.feed(frame[:2])
	assert list(packetizer.process_buffer()) == []
	assert packetizer.packet_length is None

	packetizer.feed(frame[2:6])
	assert list(packetizer.process_buffer()) == []
	assert packetizer.packet_length == len(frame) - 4

	packetizer.feed(frame[6:])
	packets = list(packetizer.process_buffer())
	assert len(packets) == 1
	assert packets[0].length == len(frame) - 4

def test_several_frames_in_one_delivery_with_trailing_partial():
	frame = frame_packet(SSH_FXP.HANDLE, uint32(5) + string(b'abc'))
	packetizer = SFTPPacketizer()
	packetizer.feed(frame + frame + frame[:3])
	assert len(list(packetizer.process_buffer())) == 2
	packetizer.feed(frame[3:])
	assert len(list(packetizer.process_buffer())) == 1

def test_zero_length_frame():
	packetizer = SFTPPacketizer()
	packetizer.feed(b'\x00\x00\x00\x00')
	with pytest.raises(SFTPProtocolError):
		list(packetizer.process_buffer())

