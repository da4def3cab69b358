import asyncio
import logging
from asysocks.unicomm.client import UniClient
from asysocks.unicomm.common.target import UniTarget
from asysocks.unicomm.common.packetizers import Packetizer
from asysftp.channels import SFTPChannel


class SFTPStreamChannel(SFTPChannel):
	"""SFTP over a plain TCP stream (eg. an sftp-server behind socat or an inetd style listener).
	Proxies configured on the target are honored by asysocks.
	"""
	def __init__(self, target:UniTarget, logger:logging.Logger = None):
		SFTPChannel.__init__(self, logger = logger)
		self.target = target
		self.__connection = None
		self.__incoming_task = None

	async def channel_open(self):
		try:
			self.logger.debug('Connecting to %s:%s' % (self.target.ip, self.target.port))
			client = UniClient(self.target, Packetizer())
			self.__connection = await client.connect()
			self.logger.debug('Connection OK')
			self.__incoming_task = asyncio.create_task(self.__handle_in())
			return True, None
		except Exception as e:
			return None, e

	async def channel_request(self, request:str, data:str):
		# a raw stream carries nothing but the sftp subsystem
		return request == 'subsystem' and self.__connection is not None, None

	async def __handle_in(self):
		try:
			async for data in self.__connection.read():
				if data is None:
					break
				self.data_in(data)
		except asyncio.CancelledError:
			return
		except Exception as e:
			self.logger.debug('Stream reader stopped: %s' % e)
		await self.close()

	async def channel_data_out(self, data:bytes):
		try:
			await self.__connection.write(data)
			return True, None
		except Exception as e:
			return None, e

	async def channel_close(self):
		if self.__incoming_task is not None and self.__incoming_task is not asyncio.current_task():
			self.__incoming_task.cancel()
		if self.__connection is not None:
			await self.__connection.close()
