import itertools
import pytest

from asysftp.common.resolver import SFTPStaticResolver
from asysftp.protocol.buffer import SFTPBuffer, uint32, uint64, string
from asysftp.protocol.constants import SSH_FILEXFER_ATTR, SSH_FILEXFER_ATTR_V4, SSH_FILEXFER_TYPE, SSH_FILEXFER_TEXT_HINT
from asysftp.protocol.errors import SFTPBufferError
from asysftp.protocol.v01 import AttributesV1
from asysftp.protocol.v04 import AttributesV4, ACE
from asysftp.protocol.v05 import AttributesV5
from asysftp.protocol.v06 import AttributesV6

V1_GROUPS = {
	'size' : ({'size' : 2**33 + 5}, SSH_FILEXFER_ATTR.SIZE),
	'uidgid' : ({'uid' : 1000, 'gid' : 100}, SSH_FILEXFER_ATTR.UIDGID),
	'permissions' : ({'permissions' : 0o100644}, SSH_FILEXFER_ATTR.PERMISSIONS),
	'times' : ({'atime' : 1600000000, 'mtime' : 1600000100}, SSH_FILEXFER_ATTR.ACMODTIME),
	'extended' : ({'extended' : [(b'foo@example.com', b'bar'), (b'foo@example.com', b'baz')]}, SSH_FILEXFER_ATTR.EXTENDED),
}

def v1_subsets():
	names = sorted(V1_GROUPS)
	for n in range(len(names) + 1):
		for combo in itertools.combinations(names, n):
			yield combo

@pytest.mark.parametrize('groups', list(v1_subsets()), ids = lambda g: '+'.join(g) or 'empty')
def test_v1_subset_roundtrip(groups):
	kwargs = {}
	expected_flags = SSH_FILEXFER_ATTR(0)
	for name in groups:
		fields, flag = V1_GROUPS[name]
		kwargs.update(fields)
		expected_flags |= flag

	attrs = AttributesV1(**kwargs)
	data = attrs.to_bytes()
	assert SFTPBuffer(data).read_uint32() == expected_flags

	decoded = AttributesV1.from_bytes(data)
	assert decoded == attrs
	for name in ('size', 'uid', 'gid', 'permissions', 'atime', 'mtime', 'extended'):
		assert getattr(decoded, name) == kwargs.get(name)

def test_v1_exact_layout():
	attrs = AttributesV1(size = 5, permissions = 0o640)
	assert attrs.to_bytes() == uint32(0x5) + uint64(5) + uint32(0o640)

def test_v1_empty_extended_is_present():
	assert AttributesV1(extended = []).to_bytes() == uint32(0x80000000) + uint32(0)
	assert AttributesV1().to_bytes() == uint32(0)
	assert AttributesV1.from_bytes(uint32(0x80000000) + uint32(0)).extended == []
	assert AttributesV1.from_bytes(uint32(0)).extended is None

def test_v1_extended_keeps_order_and_duplicates():
	data = uint32(0x80000000) + uint32(2) + string(b'a') + string(b'1') + string(b'a') + string(b'2')
	assert AttributesV1.from_bytes(data).extended == [(b'a', b'1'), (b'a', b'2')]

@pytest.mark.parametrize('kwargs', [
	{'uid' : 1},
	{'gid' : 1},
	{'atime' : 1},
	{'mtime' : 1},
])
def test_v1_half_pairs_rejected(kwargs):
	with pytest.raises(ValueError):
		AttributesV1(**kwargs)

def test_v1_owner_group_resolved():
	resolver = SFTPStaticResolver(users = {'alice' : 1001}, groups = {'staff' : 50})
	attrs = AttributesV1(owner = 'alice', group = 'staff', resolver = resolver)
	assert (attrs.uid, attrs.gid) == (1001, 50)
	assert attrs.flags == SSH_FILEXFER_ATTR.UIDGID

def test_v1_from_dict_uses_resolver():
	resolver = SFTPStaticResolver(users = {'bob' : 7}, groups = {'wheel' : 0})
	attrs = AttributesV1.from_dict({'owner' : 'bob', 'group' : 'wheel', 'size' : 1}, resolver = resolver)
	assert (attrs.uid, attrs.gid, attrs.size) == (7, 0, 1)

def test_v1_truncated():
	with pytest.raises(SFTPBufferError):
		AttributesV1.from_bytes(uint32(0x1) + b'\x00\x00')

def test_v1_type_helpers():
	assert AttributesV1(permissions = 0o40755).is_dir is True
	assert AttributesV1(permissions = 0o100644).is_file is True
	assert AttributesV1(permissions = 0o120777).is_link is True
	assert AttributesV1().ftype is None

def test_v4_roundtrip():
	attrs = AttributesV4(
		size = 10,
		owner = 'alice',
		group = 'staff',
		permissions = 0o100600,
		atime = -5,
		atime_nseconds = 7,
		mtime = 1700000000,
		acl = [ACE(0, 0, 1, 'EVERYONE@')],
		extended = [(b'x', b'y')],
	)
	data = attrs.to_bytes()
	flags = SFTPBuffer(data).read_uint32()
	assert flags == SSH_FILEXFER_ATTR_V4.SIZE | SSH_FILEXFER_ATTR_V4.OWNERGROUP | \
		SSH_FILEXFER_ATTR_V4.PERMISSIONS | SSH_FILEXFER_ATTR_V4.ACCESSTIME | \
		SSH_FILEXFER_ATTR_V4.MODIFYTIME | SSH_FILEXFER_ATTR_V4.SUBSECOND_TIMES | \
		SSH_FILEXFER_ATTR_V4.ACL | SSH_FILEXFER_ATTR_V4.EXTENDED
	assert data[4] == SSH_FILEXFER_TYPE.REGULAR.value

	decoded = AttributesV4.from_bytes(data)
	assert decoded.type == SSH_FILEXFER_TYPE.REGULAR
	assert decoded.atime == -5
	assert decoded.atime_nseconds == 7
	# SUBSECOND_TIMES applies to every time field present
	assert decoded.mtime_nseconds == 0
	assert decoded.acl == attrs.acl
	assert decoded.owner == 'alice'
	assert decoded.extended == [(b'x', b'y')]

def test_v4_uid_gid_become_names():
	resolver = SFTPStaticResolver(users = {'alice' : 1001}, groups = {'staff' : 50})
	attrs = AttributesV4(uid = 1001, gid = 50, resolver = resolver)
	assert (attrs.owner, attrs.group) == ('alice', 'staff')
	assert attrs.flags == SSH_FILEXFER_ATTR_V4.OWNERGROUP

def test_v4_type_from_permissions():
	assert AttributesV4(permissions = 0o40755).file_type == SSH_FILEXFER_TYPE.DIRECTORY
	assert AttributesV4().file_type == SSH_FILEXFER_TYPE.REGULAR
	assert AttributesV4().to_bytes() == uint32(0) + b'\x01'

def test_v4_rejects_later_fields():
	with pytest.raises(TypeError):
		AttributesV4(attrib_bits = 1)

def test_v4_half_owner_rejected():
	with pytest.raises(ValueError):
		AttributesV4(owner = 'alice')

def test_v5_attrib_bits_after_acl():
	attrs = AttributesV5(attrib_bits = 0x4, acl = [])
	data = attrs.to_bytes()
	assert data == uint32(SSH_FILEXFER_ATTR_V4.ACL | SSH_FILEXFER_ATTR_V4.BITS) + b'\x01' + \
		string(uint32(0)) + uint32(0x4)
	decoded = AttributesV5.from_bytes(data)
	assert decoded.attrib_bits == 0x4
	assert decoded.acl == []

def test_v6_roundtrip():
	attrs = AttributesV6(
		type = SSH_FILEXFER_TYPE.DIRECTORY,
		size = 4096,
		allocation_size = 8192,
		permissions = 0o40755,
		ctime = 1700000001,
		createtime = 1600000000,
		attrib_bits = 0x1,
		attrib_bits_valid = 0x3,
		text_hint = SSH_FILEXFER_TEXT_HINT.KNOWN_BINARY,
		mime_type = 'inode/directory',
		link_count = 2,
		untranslated_name = b'\xffdir',
		acl = [ACE(1, 0, 2, 'OWNER@')],
		acl_flags = 0x10,
	)
	decoded = AttributesV6.from_bytes(attrs.to_bytes())
	assert decoded == attrs
	assert decoded.is_dir is True

def test_v6_attrib_bits_valid_default():
	decoded = AttributesV6.from_bytes(AttributesV6(attrib_bits = 0x1).to_bytes())
	assert decoded.attrib_bits_valid == 0xffffffff

def test_v4_non_utf8_owner_roundtrip():
	data = AttributesV4(owner = 'x', group = 'y').to_bytes()
	data = data.replace(string('x'), string(b'j\xf6rg'))
	decoded = AttributesV4.from_bytes(data)
	assert decoded.owner.encode('utf-8', 'surrogateescape') == b'j\xf6rg'
	assert decoded.to_bytes() == data
