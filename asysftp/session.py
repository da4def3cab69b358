import enum
import asyncio
import logging
from typing import Dict, Callable
from asysftp import logger as default_logger
from asysftp.channels import SFTPChannel
from asysftp.common.settings import SFTPSessionSettings
from asysftp.protocol import load_protocol
from asysftp.protocol.buffer import uint32
from asysftp.protocol.constants import SSH_FXP
from asysftp.protocol.errors import SFTPProtocolError, SFTPSubsystemError, SFTPSessionError, SFTPChannelError
from asysftp.protocol.packet import frame_packet
from asysftp.protocol.packetizer import SFTPPacketizer
from asysftp.protocol.response import SFTPResponse


class SFTPSessionState(enum.Enum):
	CLOSED = 'CLOSED'
	OPENING = 'OPENING'
	SUBSYSTEM = 'SUBSYSTEM'
	INIT = 'INIT'
	OPEN = 'OPEN'


class SFTPSession:
	"""Client side of the SFTP subsystem running over an SFTPChannel.

	Every request primitive is synchronous: it allocates a request id, stores a
	future for it in pending_requests, queues the frame on the channel and
	returns the id. The future resolves to an SFTPResponse once the server
	answers. Use response(id) to get the future, or pass a callback.

	Errors that make the incoming stream unusable (unknown request id,
	unexpected packet type, malformed frames) are recorded in fatal_error,
	stop any further processing and are re-raised by loop().
	"""
	def __init__(self, channel:SFTPChannel, settings:SFTPSessionSettings = None, logger:logging.Logger = None, on_ready:Callable = None):
		self.channel = channel
		self.settings = settings if settings is not None else SFTPSessionSettings()
		self.logger = logger if logger is not None else default_logger
		self.on_ready = on_ready
		self.state = SFTPSessionState.CLOSED
		self.packetizer = SFTPPacketizer()
		self.protocol = None
		self.pending_requests:Dict[int, asyncio.Future] = None
		self.server_version:int = None
		self.version:int = None
		self.extensions:Dict[str, bytes] = {}
		self.fatal_error:Exception = None
		self.__progress_evt = asyncio.Event()

	@property
	def input(self):
		return self.packetizer.in_buffer

	@property
	def packet_length(self):
		return self.packetizer.packet_length

	@property
	def is_open(self):
		return self.state == SFTPSessionState.OPEN

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc, tb):
		await self.close_channel()

	async def connect(self, channel:SFTPChannel = None):
		"""Opens the channel, starts the subsystem and negotiates the protocol version.
		Returns once the session is open. A closed channel can't be reopened,
		pass a fresh one to reconnect after the previous channel went away."""
		if self.state != SFTPSessionState.CLOSED:
			return True, None
		try:
			if channel is not None:
				self.channel = channel
			if self.channel is None:
				raise SFTPSessionError('Channel was closed, a new channel is required')
			self.state = SFTPSessionState.OPENING
			self.packetizer = SFTPPacketizer()
			self.protocol = None
			self.pending_requests = None
			self.fatal_error = None

			self.logger.debug('Opening SFTP channel')
			_, err = await self.channel.open()
			if err is not None:
				raise err

			self.when_channel_confirmed(self.channel)
			success, err = await self.channel.subsystem(self.settings.subsystem)
			if err is not None:
				raise err
			self.when_subsystem_started(self.channel, success)

			while self.state != SFTPSessionState.OPEN:
				if self.fatal_error is not None:
					raise self.fatal_error
				if self.state == SFTPSessionState.CLOSED:
					raise SFTPSessionError('Channel closed before the SFTP session was ready')
				await self.__wait_progress()
			return True, None
		except Exception as e:
			if self.state != SFTPSessionState.OPEN:
				self.state = SFTPSessionState.CLOSED
				if self.channel is not None:
					await self.channel.close()
			return None, e

	async def close_channel(self):
		if self.channel is not None:
			await self.channel.close()

	async def __wait_progress(self):
		self.__progress_evt.clear()
		await self.__progress_evt.wait()

	async def loop(self, predicate:Callable = None):
		"""Waits while predicate() holds, by default while there are pending requests.
		Returns early if the channel closes, raises the fatal error if one occurred."""
		if predicate is None:
			predicate = lambda: self.pending_requests is not None and len(self.pending_requests) > 0
		while True:
			if self.fatal_error is not None:
				raise self.fatal_error
			if not predicate():
				return
			if self.channel is None:
				return
			await self.__wait_progress()

	def response(self, reqid:int) -> asyncio.Future:
		"""Returns the future of a pending request"""
		if self.pending_requests is None or reqid not in self.pending_requests:
			raise SFTPSessionError('No pending request with id %s' % reqid)
		return self.pending_requests[reqid]

	def send_packet(self, ptype:SSH_FXP, payload:bytes):
		if self.channel is None:
			raise SFTPChannelError('SFTP channel is closed')
		self.logger.debug('Sending SFTP packet %s len %s' % (ptype.name, len(payload) + 1))
		self.channel.send_data(frame_packet(ptype, payload))

	def when_channel_confirmed(self, channel:SFTPChannel):
		self.logger.debug('Requesting %s subsystem' % self.settings.subsystem)
		self.state = SFTPSessionState.SUBSYSTEM

	def when_subsystem_started(self, channel:SFTPChannel, success:bool):
		if success is not True:
			raise SFTPSubsystemError('Could not start SFTP subsystem')

		self.logger.debug('SFTP subsystem successfully started')
		self.state = SFTPSessionState.INIT

		channel.on_data = self.when_channel_data
		channel.on_extended_data = self.when_extended_data
		channel.on_close = self.when_channel_closed

		self.send_packet(SSH_FXP.INIT, uint32(self.settings.highest_version))

	def when_extended_data(self, channel:SFTPChannel, datatype:int, data:bytes):
		self.logger.debug('SFTP extended data (%s): %r' % (datatype, data))

	def when_channel_closed(self, channel:SFTPChannel):
		self.logger.debug('SFTP channel closed')
		self.channel = None
		self.state = SFTPSessionState.CLOSED
		self.__progress_evt.set()

	def when_channel_data(self, channel:SFTPChannel, data:bytes):
		if self.fatal_error is not None:
			self.logger.debug('Dropping %s bytes, session already failed' % len(data))
			return
		try:
			self.packetizer.feed(data)
			for packet in self.packetizer.process_buffer():
				self.logger.debug('Received SFTP packet %s len %s' % (packet.type, packet.length))
				if packet.type == SSH_FXP.VERSION:
					self.do_version(packet)
				elif packet.type in (SSH_FXP.STATUS, SSH_FXP.HANDLE, SSH_FXP.DATA, SSH_FXP.NAME, SSH_FXP.ATTRS):
					self.dispatch_request(packet)
				else:
					raise SFTPProtocolError('Unhandled packet %s' % packet.type)
		except Exception as e:
			self.fatal_error = e
			raise
		finally:
			self.__progress_evt.set()

	def do_version(self, packet):
		if self.protocol is not None:
			raise SFTPProtocolError('Received a second VERSION packet')

		self.logger.debug('Negotiating SFTP protocol version, mine is %s' % self.settings.highest_version)
		server_version = packet.read_uint32()
		self.logger.debug('Server reports SFTP version %s' % server_version)
		negotiated = min(server_version, self.settings.highest_version)
		self.logger.debug('Negotiated version is %s' % negotiated)

		extensions = {}
		buff = packet.buffer
		while not buff.eof():
			name = buff.read_str()
			data = buff.read_string()
			extensions[name] = data

		protocol = load_protocol(self, negotiated, resolver = self.settings.resolver)
		self.server_version = server_version
		self.version = negotiated
		self.extensions = extensions
		self.protocol = protocol
		self.pending_requests = {}
		self.state = SFTPSessionState.OPEN
		if self.on_ready is not None:
			self.on_ready(self)

	def dispatch_request(self, packet):
		if self.pending_requests is None:
			raise SFTPProtocolError('Received %s before version negotiation' % packet.type)

		reqid = packet.read_uint32()
		fut = self.pending_requests.pop(reqid, None)
		if fut is None:
			raise SFTPProtocolError("No such request '%s'" % reqid)

		if packet.type == SSH_FXP.STATUS:
			code, message, language = self.protocol.parse_status(packet)
			response = SFTPResponse(reqid, code, message, language)
		elif packet.type == SSH_FXP.HANDLE:
			response = SFTPResponse.ok(reqid, self.protocol.parse_handle(packet))
		elif packet.type == SSH_FXP.DATA:
			response = SFTPResponse.ok(reqid, self.protocol.parse_data(packet))
		elif packet.type == SSH_FXP.NAME:
			response = SFTPResponse.ok(reqid, self.protocol.parse_name(packet))
		else:
			response = SFTPResponse.ok(reqid, self.protocol.parse_attrs(packet))

		if fut.done() is False:
			fut.set_result(response)

	def __require_open(self):
		if self.state != SFTPSessionState.OPEN or self.protocol is None:
			raise SFTPSessionError('SFTP session is not open (state: %s)' % self.state.name)
		return self.protocol

	def __send_request(self, request, callback:Callable = None) -> int:
		reqid, ptype, payload = request
		fut = asyncio.Future()
		if callback is not None:
			def on_done(f):
				try:
					if f.cancelled() is False:
						callback(f.result())
				finally:
					self.__progress_evt.set()
			fut.add_done_callback(on_done)
		self.pending_requests[reqid] = fut
		try:
			self.send_packet(ptype, payload)
		except Exception:
			del self.pending_requests[reqid]
			raise
		return reqid

	@staticmethod
	def mode_to_attrs(attrs, mode:int):
		if mode is None:
			return attrs
		if attrs is None:
			return {'permissions' : mode}
		if isinstance(attrs, dict) and 'permissions' not in attrs:
			attrs = dict(attrs)
			attrs['permissions'] = mode
		return attrs

	def open(self, path:str, flags = 'r', mode:int = 0o640, attrs = None, callback:Callable = None) -> int:
		"""Opens a remote file. flags can be a python mode string, os.O_* bits or SSH_FXF flags"""
		protocol = self.__require_open()
		return self.__send_request(protocol.open(path, flags, self.mode_to_attrs(attrs, mode)), callback)

	def close(self, handle:bytes, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().close(handle), callback)

	def read(self, handle:bytes, offset:int, length:int, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().read(handle, offset, length), callback)

	def write(self, handle:bytes, offset:int, data:bytes, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().write(handle, offset, data), callback)

	def lstat(self, path:str, flags:int = None, callback:Callable = None) -> int:
		"""Stat without following symlinks. flags is only sent from version 4 on"""
		return self.__send_request(self.__require_open().lstat(path, flags), callback)

	def fstat(self, handle:bytes, flags:int = None, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().fstat(handle, flags), callback)

	def stat(self, path:str, flags:int = None, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().stat(path, flags), callback)

	def setstat(self, path:str, attrs, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().setstat(path, attrs), callback)

	def fsetstat(self, handle:bytes, attrs, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().fsetstat(handle, attrs), callback)

	def opendir(self, path:str, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().opendir(path), callback)

	def readdir(self, handle:bytes, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().readdir(handle), callback)

	def remove(self, path:str, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().remove(path), callback)

	def mkdir(self, path:str, attrs = None, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().mkdir(path, attrs), callback)

	def rmdir(self, path:str, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().rmdir(path), callback)

	def realpath(self, path:str, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().realpath(path), callback)

	def rename(self, oldpath:str, newpath:str, flags:int = None, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().rename(oldpath, newpath, flags), callback)

	def readlink(self, path:str, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().readlink(path), callback)

	def symlink(self, linkpath:str, targetpath:str, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().symlink(linkpath, targetpath), callback)

	def link(self, newpath:str, existingpath:str, symlink:bool, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().link(newpath, existingpath, symlink), callback)

	def block(self, handle:bytes, offset:int, length:int, mask:int, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().block(handle, offset, length, mask), callback)

	def unblock(self, handle:bytes, offset:int, length:int, callback:Callable = None) -> int:
		return self.__send_request(self.__require_open().unblock(handle, offset, length), callback)

	def __str__(self):
		return '<SFTPSession state=%s version=%s>' % (self.state.name, self.version)
