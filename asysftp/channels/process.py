import asyncio
import shlex
import logging
from typing import List
from asysftp.channels import SFTPChannel

SFTP_SERVER_COMMAND = '/usr/lib/openssh/sftp-server'


class SFTPProcessChannel(SFTPChannel):
	"""Runs an sftp-server binary locally and talks to it over its stdio.
	stdout is the data stream, stderr arrives as extended data type 1.
	"""
	def __init__(self, command = SFTP_SERVER_COMMAND, logger:logging.Logger = None):
		SFTPChannel.__init__(self, logger = logger)
		if isinstance(command, str):
			command = shlex.split(command)
		self.command:List[str] = command
		self.process = None
		self.__reader_tasks = []

	async def channel_open(self):
		try:
			self.process = await asyncio.create_subprocess_exec(
				*self.command,
				stdin = asyncio.subprocess.PIPE,
				stdout = asyncio.subprocess.PIPE,
				stderr = asyncio.subprocess.PIPE,
			)
			self.logger.debug('Started %s pid %s' % (self.command[0], self.process.pid))
			self.__reader_tasks.append(asyncio.create_task(self.__read_stdout()))
			self.__reader_tasks.append(asyncio.create_task(self.__read_stderr()))
			return True, None
		except Exception as e:
			return None, e

	async def channel_request(self, request:str, data:str):
		if request != 'subsystem':
			return False, None
		# the process already is the subsystem
		return self.process is not None and self.process.returncode is None, None

	async def __read_stdout(self):
		try:
			while True:
				data = await self.process.stdout.read(65536)
				if data == b'':
					break
				self.data_in(data)
		except asyncio.CancelledError:
			return
		except Exception as e:
			self.logger.debug('SFTP server stdout reader stopped: %s' % e)
		await self.close()

	async def __read_stderr(self):
		try:
			while True:
				data = await self.process.stderr.read(65536)
				if data == b'':
					break
				self.extended_data_in(1, data)
		except asyncio.CancelledError:
			return
		except Exception as e:
			self.logger.debug('SFTP server stderr reader stopped: %s' % e)

	async def channel_data_out(self, data:bytes):
		try:
			self.process.stdin.write(data)
			await self.process.stdin.drain()
			return True, None
		except Exception as e:
			return None, e

	async def channel_close(self):
		current = asyncio.current_task()
		for task in self.__reader_tasks:
			if task is not current:
				task.cancel()
		if self.process is None:
			return
		if self.process.returncode is None:
			try:
				self.process.stdin.close()
				await asyncio.wait_for(self.process.wait(), 5)
			except asyncio.TimeoutError:
				self.process.kill()
				await self.process.wait()
		self.logger.debug('SFTP server process exited with %s' % self.process.returncode)
