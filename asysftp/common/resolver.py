
class SFTPOwnerResolver:
	"""Translates between user/group names and numeric ids using the local account database.
	Attributes call this when they are built from names (v1-v3) or from ids (v4+).
	Subclass or replace it to resolve against something else.
	"""
	def owner_to_uid(self, owner:str) -> int:
		import pwd
		return pwd.getpwnam(owner).pw_uid

	def group_to_gid(self, group:str) -> int:
		import grp
		return grp.getgrnam(group).gr_gid

	def uid_to_owner(self, uid:int) -> str:
		import pwd
		return pwd.getpwuid(uid).pw_name

	def gid_to_group(self, gid:int) -> str:
		import grp
		return grp.getgrgid(gid).gr_name


class SFTPStaticResolver(SFTPOwnerResolver):
	"""Resolves from fixed name -> id tables"""
	def __init__(self, users:dict = None, groups:dict = None):
		self.users = users if users is not None else {}
		self.groups = groups if groups is not None else {}

	def owner_to_uid(self, owner:str) -> int:
		return self.users[owner]

	def group_to_gid(self, group:str) -> int:
		return self.groups[group]

	def uid_to_owner(self, uid:int) -> str:
		for name, xid in self.users.items():
			if xid == uid:
				return name
		raise KeyError(uid)

	def gid_to_group(self, gid:int) -> str:
		for name, xid in self.groups.items():
			if xid == gid:
				return name
		raise KeyError(gid)
