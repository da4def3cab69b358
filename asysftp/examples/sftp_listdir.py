import sys
import traceback
import asyncio
from asysftp.session import SFTPSession
from asysftp.channels.process import SFTPProcessChannel

def print_entries(response):
	if response.is_ok is False:
		return
	for entry in response.data:
		print(entry.longname if entry.longname is not None else entry.filename)

async def amain(path):
	session = SFTPSession(SFTPProcessChannel())
	try:
		_, err = await session.connect()
		if err is not None:
			raise err

		handle = (await session.response(session.opendir(path))).data
		while True:
			response = await session.response(session.readdir(handle, callback = print_entries))
			if response.is_eof is True:
				break
		session.close(handle)
		await session.loop()
	except Exception as e:
		traceback.print_exc()
	finally:
		await session.close_channel()

def main():
	asyncio.run(amain(sys.argv[1] if len(sys.argv) > 1 else '.'))

if __name__ == '__main__':
	main()
