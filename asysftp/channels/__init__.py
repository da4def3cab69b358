import asyncio
import logging
from asysftp import logger as default_logger
from asysftp.protocol.errors import SFTPChannelError


class SFTPChannel:
	"""Duplex byte channel the SFTP session runs on.

	The session registers on_data(channel, data), on_extended_data(channel, datatype, data)
	and on_close(channel). Outgoing data is queued by send_data and written by a
	background task, so send_data never blocks the caller.

	Transports override channel_open, channel_request, channel_data_out and channel_close,
	and report incoming traffic through data_in, extended_data_in and close.
	"""
	def __init__(self, logger:logging.Logger = None):
		self.logger = logger if logger is not None else default_logger
		self.on_data = None
		self.on_extended_data = None
		self.on_close = None
		self.channel_opened_evt = asyncio.Event()
		self.channel_closed_evt = asyncio.Event()
		self.__out_queue = None
		self.__outgoing_task = None

	async def open(self):
		"""Opens the channel, returns once the transport confirmed it"""
		try:
			_, err = await self.channel_open()
			if err is not None:
				raise err
			self.__out_queue = asyncio.Queue()
			self.__outgoing_task = asyncio.create_task(self.__handle_out())
			self.channel_opened_evt.set()
			return True, None
		except Exception as e:
			return None, e

	async def subsystem(self, name:str):
		"""Requests a named subsystem. Returns (success, err)"""
		return await self.channel_request('subsystem', name)

	def send_data(self, data:bytes):
		if self.channel_closed_evt.is_set() is True or self.__out_queue is None:
			raise SFTPChannelError('Channel is closed! Cannot send data!')
		self.__out_queue.put_nowait(data)

	async def __handle_out(self):
		try:
			while True:
				data = await self.__out_queue.get()
				_, err = await self.channel_data_out(data)
				if err is not None:
					raise err
		except asyncio.CancelledError:
			pass
		except Exception as e:
			self.logger.debug('Channel write failed: %s' % e)
			await self.close()

	def data_in(self, data:bytes):
		if self.on_data is not None:
			self.on_data(self, data)

	def extended_data_in(self, datatype:int, data:bytes):
		if self.on_extended_data is not None:
			self.on_extended_data(self, datatype, data)

	async def close(self):
		"""Don't overwrite this function, use channel_close instead"""
		if self.channel_closed_evt.is_set() is True:
			return
		self.channel_closed_evt.set()
		try:
			await self.channel_close()
		except Exception as e:
			self.logger.debug('Channel close failed: %s' % e)
		finally:
			if self.__outgoing_task is not None and self.__outgoing_task is not asyncio.current_task():
				self.__outgoing_task.cancel()
			if self.on_close is not None:
				self.on_close(self)

	async def channel_open(self):
		"""Override this function to open the underlying transport. Returns (success, err)"""
		return True, None

	async def channel_request(self, request:str, data:str):
		"""Override this function to handle channel requests. Returns (success, err)"""
		return False, None

	async def channel_data_out(self, data:bytes):
		"""Override this function to write data to the transport. Returns (success, err)"""
		raise NotImplementedError()

	async def channel_close(self):
		"""Override this function to do something when the channel is closed"""
		pass
