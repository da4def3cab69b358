import logging
from typing import List
from asysocks.unicomm.common.target import UniProto, UniTarget

from asysftp.session import SFTPSession
from asysftp.channels.process import SFTPProcessChannel, SFTP_SERVER_COMMAND
from asysftp.channels.stream import SFTPStreamChannel
from asysftp.common.settings import SFTPSessionSettings
from asysftp.protocol.constants import SSH_FX
from asysftp.protocol.errors import SFTPChannelError


class SFTPClient:
	"""Awaitable front-end for an SFTPSession. Every call returns (result, err)"""
	def __init__(self, session:SFTPSession):
		self.session = session

	@staticmethod
	async def from_channel(channel, settings:SFTPSessionSettings = None, logger:logging.Logger = None):
		"""Starts an SFTP session on an already constructed channel and returns a new SFTPClient"""
		try:
			session = SFTPSession(channel, settings = settings, logger = logger)
			_, err = await session.connect()
			if err is not None:
				raise err
			return SFTPClient(session), None
		except Exception as e:
			return None, e

	@staticmethod
	async def connect_process(command = SFTP_SERVER_COMMAND, settings:SFTPSessionSettings = None, logger:logging.Logger = None):
		"""Runs a local sftp-server binary and returns a new SFTPClient talking to it"""
		return await SFTPClient.from_channel(SFTPProcessChannel(command, logger = logger), settings = settings, logger = logger)

	@staticmethod
	async def connect_tcp(host:str, port:int, timeout:int = 10, proxies:List = None, settings:SFTPSessionSettings = None, logger:logging.Logger = None):
		"""Connects to a TCP endpoint speaking raw SFTP and returns a new SFTPClient"""
		try:
			target = UniTarget(
				host,
				port,
				UniProto.CLIENT_TCP,
				timeout=timeout,
				proxies=proxies
			)
		except Exception as e:
			return None, e
		return await SFTPClient.from_channel(SFTPStreamChannel(target, logger = logger), settings = settings, logger = logger)

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc, tb):
		await self.close()

	@property
	def version(self):
		return self.session.version

	@property
	def extensions(self):
		return self.session.extensions

	async def close(self):
		await self.session.close_channel()

	async def __resolve(self, reqid:int, allow_eof:bool = False):
		fut = self.session.response(reqid)
		await self.session.loop(lambda: fut.done() is False)
		if fut.done() is False:
			raise SFTPChannelError('Channel closed while waiting for response %s' % reqid)
		response = fut.result()
		if allow_eof is True and response.code == SSH_FX.EOF:
			return None
		if response.is_ok is False:
			raise response.get_exception()
		return response

	async def open(self, path:str, flags = 'r', mode:int = 0o640, attrs = None):
		"""Opens a file, returns the handle"""
		try:
			response = await self.__resolve(self.session.open(path, flags, mode = mode, attrs = attrs))
			return response.data, None
		except Exception as e:
			return None, e

	async def close_handle(self, handle:bytes):
		"""Closes a file or directory handle"""
		try:
			await self.__resolve(self.session.close(handle))
			return True, None
		except Exception as e:
			return None, e

	async def read(self, handle:bytes, offset:int, length:int):
		"""Reads at most length bytes. Returns b'' at the end of the file"""
		try:
			response = await self.__resolve(self.session.read(handle, offset, length), allow_eof = True)
			if response is None:
				return b'', None
			return response.data, None
		except Exception as e:
			return None, e

	async def read_all(self, handle:bytes, offset:int = 0):
		"""Reads from offset until the end of the file"""
		try:
			data = b''
			while True:
				chunk, err = await self.read(handle, offset + len(data), self.session.settings.max_read_size)
				if err is not None:
					raise err
				if len(chunk) == 0:
					break
				data += chunk
			return data, None
		except Exception as e:
			return None, e

	async def write(self, handle:bytes, offset:int, data:bytes):
		"""Writes data at offset, split into max_read_size sized requests"""
		try:
			chunk_size = self.session.settings.max_read_size
			for i in range(0, len(data), chunk_size):
				await self.__resolve(self.session.write(handle, offset + i, data[i:i+chunk_size]))
			return True, None
		except Exception as e:
			return None, e

	async def stat(self, path:str, flags:int = None):
		"""Gets the attributes of a file or directory"""
		try:
			response = await self.__resolve(self.session.stat(path, flags))
			return response.data, None
		except Exception as e:
			return None, e

	async def lstat(self, path:str, flags:int = None):
		"""Gets the attributes of a file or directory. Does NOT follow symlinks"""
		try:
			response = await self.__resolve(self.session.lstat(path, flags))
			return response.data, None
		except Exception as e:
			return None, e

	async def fstat(self, handle:bytes, flags:int = None):
		try:
			response = await self.__resolve(self.session.fstat(handle, flags))
			return response.data, None
		except Exception as e:
			return None, e

	async def setstat(self, path:str, attrs):
		try:
			await self.__resolve(self.session.setstat(path, attrs))
			return True, None
		except Exception as e:
			return None, e

	async def fsetstat(self, handle:bytes, attrs):
		try:
			await self.__resolve(self.session.fsetstat(handle, attrs))
			return True, None
		except Exception as e:
			return None, e

	async def opendir(self, path:str):
		"""Opens a directory, returns the handle"""
		try:
			response = await self.__resolve(self.session.opendir(path))
			return response.data, None
		except Exception as e:
			return None, e

	async def readdir(self, handle:bytes):
		"""Returns the next batch of SFTPName entries, None once the listing is exhausted"""
		try:
			response = await self.__resolve(self.session.readdir(handle), allow_eof = True)
			if response is None:
				return None, None
			return response.data, None
		except Exception as e:
			return None, e

	async def listdir(self, path:str):
		"""Lists a single directory (not recursive)"""
		handle = None
		try:
			handle, err = await self.opendir(path)
			if err is not None:
				raise err
			entries = []
			while True:
				batch, err = await self.readdir(handle)
				if err is not None:
					raise err
				if batch is None:
					break
				entries.extend(batch)
			return entries, None
		except Exception as e:
			return None, e
		finally:
			if handle is not None:
				await self.close_handle(handle)

	async def remove(self, path:str):
		"""Deletes a file"""
		try:
			await self.__resolve(self.session.remove(path))
			return True, None
		except Exception as e:
			return None, e

	async def mkdir(self, path:str, attrs = None):
		"""Creates a directory"""
		try:
			await self.__resolve(self.session.mkdir(path, attrs))
			return True, None
		except Exception as e:
			return None, e

	async def rmdir(self, path:str):
		"""Removes a directory"""
		try:
			await self.__resolve(self.session.rmdir(path))
			return True, None
		except Exception as e:
			return None, e

	async def realpath(self, path:str):
		"""Gets the canonical absolute path"""
		try:
			response = await self.__resolve(self.session.realpath(path))
			return response.data[0].filename, None
		except Exception as e:
			return None, e

	async def rename(self, oldpath:str, newpath:str, flags:int = None):
		try:
			await self.__resolve(self.session.rename(oldpath, newpath, flags))
			return True, None
		except Exception as e:
			return None, e

	async def readlink(self, path:str):
		"""Gets the target of a symlink"""
		try:
			response = await self.__resolve(self.session.readlink(path))
			return response.data[0].filename, None
		except Exception as e:
			return None, e

	async def symlink(self, linkpath:str, targetpath:str):
		"""Creates a symlink at linkpath pointing to targetpath"""
		try:
			await self.__resolve(self.session.symlink(linkpath, targetpath))
			return True, None
		except Exception as e:
			return None, e

	async def link(self, newpath:str, existingpath:str, symlink:bool = False):
		try:
			await self.__resolve(self.session.link(newpath, existingpath, symlink))
			return True, None
		except Exception as e:
			return None, e

	async def block(self, handle:bytes, offset:int, length:int, mask:int):
		try:
			await self.__resolve(self.session.block(handle, offset, length, mask))
			return True, None
		except Exception as e:
			return None, e

	async def unblock(self, handle:bytes, offset:int, length:int):
		try:
			await self.__resolve(self.session.unblock(handle, offset, length))
			return True, None
		except Exception as e:
			return None, e

	async def download(self, srcpath:str, dstpath:str):
		"""Downloads a file from the remote server to the local machine"""
		handle = None
		try:
			handle, err = await self.open(srcpath, 'r')
			if err is not None:
				raise err

			offset = 0
			with open(dstpath, 'wb') as f:
				while True:
					data, err = await self.read(handle, offset, self.session.settings.max_read_size)
					if err is not None:
						raise err
					if len(data) == 0:
						break
					f.write(data)
					offset += len(data)

			return True, None
		except Exception as e:
			return False, e
		finally:
			if handle is not None:
				await self.close_handle(handle)

	async def upload(self, srcpath:str, dstpath:str):
		"""Uploads a file from the local machine to the remote server"""
		handle = None
		try:
			handle, err = await self.open(dstpath, 'w')
			if err is not None:
				raise err

			offset = 0
			with open(srcpath, 'rb') as f:
				while True:
					data = f.read(self.session.settings.max_read_size)
					if len(data) == 0:
						break
					_, err = await self.write(handle, offset, data)
					if err is not None:
						raise err
					offset += len(data)

			return True, None
		except Exception as e:
			return False, e
		finally:
			if handle is not None:
				await self.close_handle(handle)
