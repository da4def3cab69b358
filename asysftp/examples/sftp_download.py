import traceback
import asyncio
from asysftp.client import SFTPClient

async def amain():
	try:
		client, err = await SFTPClient.connect_process('/usr/lib/openssh/sftp-server')
		if err is not None:
			raise err

		async with client:
			print('Negotiated SFTP version %s' % client.version)
			_, err = await client.download('/etc/hostname', '/tmp/hostname.copy')
			if err is not None:
				raise err

		print('Done!')
	except Exception as e:
		traceback.print_exc()

def main():
	asyncio.run(amain())

if __name__ == '__main__':
	main()
