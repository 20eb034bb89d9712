import os
import sys
import base64
import shutil
import tempfile
import unittest
import http.client
from xml.dom import minidom

testdir = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, os.path.join(testdir, '..'))

from davshare.lib.INI_Parse import setupDummyConfig
from davshare.server.server import DAVServer

user = 'test'
password = 'pass'


def auth_header(u=user, p=password):
    return 'Basic ' + base64.b64encode(('%s:%s' % (u, p)).encode('utf-8')).decode('ascii')


class ServerTestCase(unittest.TestCase):

    config = {}

    def setUp(self):
        self.root = tempfile.mkdtemp()
        kw = dict(user=user, password=password, enable_logging=False)
        kw.update(self.config)
        self.server = DAVServer(self.root, setupDummyConfig(**kw), host='127.0.0.1')
        self.server.start(0, 10000)

    def tearDown(self):
        self.server.stop()
        shutil.rmtree(self.root)

    def request(self, method, path, body=None, headers=None, auth=True):
        """ send one request on a fresh connection, return (response, body) """
        headers = dict(headers or {})
        if auth and 'Authorization' not in headers:
            headers['Authorization'] = auth_header()
        conn = http.client.HTTPConnection('127.0.0.1', self.server.port, timeout=10)
        try:
            conn.request(method, path, body=body, headers=headers)
            res = conn.getresponse()
            return res, res.read()
        finally:
            conn.close()

    def local(self, *parts):
        return os.path.join(self.root, *parts)

    def write(self, name, data):
        path = self.local(name)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'wb') as fp:
            fp.write(data)

    def hrefs(self, body):
        doc = minidom.parseString(body)
        return [e.firstChild.data for e in doc.getElementsByTagNameNS('DAV:', 'href')]


class TestAuth(ServerTestCase):

    def test_no_credentials(self):
        res, body = self.request('GET', '/', auth=False)
        self.assertEqual(res.status, 401)
        self.assertEqual(res.getheader('WWW-Authenticate'), 'Basic realm="WebDAV"')
        self.assertEqual(body, b'Authentication required')

    def test_wrong_password(self):
        res, body = self.request('PROPFIND', '/', headers={
            'Authorization': auth_header(password, 'nope')})
        self.assertEqual(res.status, 401)

    def test_unauthenticated_put_leaves_no_file(self):
        res, body = self.request('PUT', '/x.txt', body=b'data', auth=False)
        self.assertEqual(res.status, 401)
        self.assertFalse(os.path.exists(self.local('x.txt')))

    def test_options_without_credentials(self):
        res, body = self.request('OPTIONS', '/', auth=False)
        self.assertEqual(res.status, 200)
        allow = [m.strip() for m in res.getheader('Allow').split(',')]
        for method in ('OPTIONS', 'GET', 'PUT', 'DELETE', 'PROPFIND',
                       'PROPPATCH', 'MKCOL', 'COPY', 'MOVE'):
            self.assertIn(method, allow)
        self.assertEqual(res.getheader('MS-Author-Via'), 'DAV')

    def test_dav_and_cors_headers(self):
        for auth in (True, False):
            res, body = self.request('GET', '/', auth=auth)
            self.assertEqual(res.getheader('DAV'), '1,2')
            self.assertEqual(res.getheader('Access-Control-Allow-Origin'), '*')
            self.assertIsNotNone(res.getheader('Access-Control-Allow-Methods'))
            self.assertIsNotNone(res.getheader('Access-Control-Allow-Headers'))

    def test_unknown_method(self):
        res, body = self.request('LOCK', '/')
        self.assertEqual(res.status, 405)
        res, body = self.request('LOCK', '/', auth=False)
        self.assertEqual(res.status, 401)


class TestGetPut(ServerTestCase):

    def roundtrip(self, data):
        res, body = self.request('PUT', '/file.bin', body=data)
        self.assertIn(res.status, (201, 204))
        res, body = self.request('GET', '/file.bin')
        self.assertEqual(res.status, 200)
        self.assertEqual(int(res.getheader('Content-Length')), len(data))
        self.assertEqual(body, data)

    def test_empty(self):
        self.roundtrip(b'')

    def test_one_byte(self):
        self.roundtrip(b'x')

    def test_one_mebibyte(self):
        self.roundtrip(os.urandom(1024 * 1024))

    def test_created_then_overwritten(self):
        res, body = self.request('PUT', '/a.txt', body=b'one')
        self.assertEqual(res.status, 201)
        self.assertIsNotNone(res.getheader('ETag'))
        res, body = self.request('PUT', '/a.txt', body=b'two')
        self.assertEqual(res.status, 204)
        with open(self.local('a.txt'), 'rb') as fp:
            self.assertEqual(fp.read(), b'two')

    def test_intermediate_directories(self):
        res, body = self.request('PUT', '/x/y/z.txt', body=b'deep')
        self.assertEqual(res.status, 201)
        self.assertTrue(os.path.isdir(self.local('x', 'y')))

    def test_chunked_upload(self):
        res, body = self.request('PUT', '/chunked.txt',
                                 body=iter([b'hello ', b'chunked ', b'world']))
        self.assertEqual(res.status, 201)
        with open(self.local('chunked.txt'), 'rb') as fp:
            self.assertEqual(fp.read(), b'hello chunked world')

    def test_get_headers(self):
        self.write('doc.txt', b'text')
        res, body = self.request('GET', '/doc.txt')
        self.assertEqual(res.getheader('Content-Type'), 'text/plain')
        self.assertIsNotNone(res.getheader('ETag'))
        self.assertTrue(res.getheader('Last-Modified').endswith('GMT'))

    def test_get_missing(self):
        res, body = self.request('GET', '/missing.txt')
        self.assertEqual(res.status, 404)

    def test_encoded_name(self):
        res, body = self.request('PUT', '/a%20b.txt', body=b'spaced')
        self.assertEqual(res.status, 201)
        self.assertTrue(os.path.exists(self.local('a b.txt')))

    def test_listing(self):
        self.write('dir/inner.txt', b'1')
        res, body = self.request('GET', '/dir/')
        self.assertEqual(res.status, 200)
        self.assertTrue(res.getheader('Content-Type').startswith('text/html'))
        self.assertIn(b'<a href="../">../</a>', body)
        self.assertIn(b'inner.txt', body)

        res, body = self.request('GET', '/')
        self.assertNotIn(b'../', body)
        self.assertIn(b'dir/', body)

    def test_traversal(self):
        for path in ('/../etc/passwd', '/%2e%2e/%2e%2e/etc/passwd', '/a/../../x'):
            res, body = self.request('GET', path)
            self.assertEqual(res.status, 403, path)

    def test_zero_content_length_is_empty_body(self):
        # the server must answer without waiting for the client to close
        conn = http.client.HTTPConnection('127.0.0.1', self.server.port, timeout=5)
        try:
            conn.request('PUT', '/zero.txt', body=b'', headers={
                'Authorization': auth_header(), 'Content-Length': '0'})
            res = conn.getresponse()
            res.read()
            self.assertEqual(res.status, 201)
            self.assertNotEqual(res.getheader('Connection'), 'close')

            conn.request('GET', '/zero.txt', headers={'Authorization': auth_header()})
            res = conn.getresponse()
            self.assertEqual(res.read(), b'')
            self.assertEqual(res.status, 200)
        finally:
            conn.close()
        self.assertEqual(os.path.getsize(self.local('zero.txt')), 0)

    @unittest.skipUnless(hasattr(os, 'symlink'), 'needs symlinks')
    def test_symlink_out_of_root(self):
        outside = tempfile.mkdtemp()
        try:
            with open(os.path.join(outside, 'secret.txt'), 'wb') as fp:
                fp.write(b'outside-root')
            os.symlink(outside, self.local('link'))

            res, body = self.request('GET', '/link/secret.txt')
            self.assertEqual(res.status, 403)
            self.assertNotIn(b'outside-root', body)

            res, body = self.request('PUT', '/link/new.txt', body=b'x')
            self.assertEqual(res.status, 403)
            self.assertFalse(os.path.exists(os.path.join(outside, 'new.txt')))
        finally:
            shutil.rmtree(outside)

    def test_keep_alive(self):
        self.write('k.txt', b'keep')
        conn = http.client.HTTPConnection('127.0.0.1', self.server.port, timeout=10)
        try:
            for i in range(3):
                conn.request('GET', '/k.txt', headers={'Authorization': auth_header()})
                res = conn.getresponse()
                self.assertEqual(res.read(), b'keep')
        finally:
            conn.close()


class TestCollections(ServerTestCase):

    def test_mkcol(self):
        res, body = self.request('MKCOL', '/newdir')
        self.assertEqual(res.status, 201)
        self.assertTrue(os.path.isdir(self.local('newdir')))

        res, body = self.request('MKCOL', '/newdir')
        self.assertEqual(res.status, 405)

    def test_delete(self):
        self.write('d/f.txt', b'x')
        res, body = self.request('DELETE', '/d')
        self.assertEqual(res.status, 204)
        self.assertFalse(os.path.exists(self.local('d')))

        res, body = self.request('DELETE', '/d')
        self.assertEqual(res.status, 404)

    def test_delete_root(self):
        res, body = self.request('DELETE', '/')
        self.assertEqual(res.status, 403)
        self.assertTrue(os.path.isdir(self.root))

    def test_propfind_depth(self):
        self.write('dir/a.txt', b'1')
        self.write('dir/b.txt', b'2')

        res, body = self.request('PROPFIND', '/dir', headers={'Depth': '0'})
        self.assertEqual(res.status, 207)
        self.assertEqual(len(self.hrefs(body)), 1)

        res, body = self.request('PROPFIND', '/dir', headers={'Depth': '1'})
        self.assertEqual(res.status, 207)
        self.assertEqual(self.hrefs(body), ['/dir', '/dir/a.txt', '/dir/b.txt'])

        res, body = self.request('PROPFIND', '/dir')
        self.assertEqual(len(self.hrefs(body)), 3)

        res, body = self.request('PROPFIND', '/dir', headers={'Depth': 'infinity'})
        self.assertEqual(res.status, 403)
        self.assertIn(b'propfind-finite-depth', body)

    def test_propfind_with_body(self):
        body = (b'<?xml version="1.0"?><D:propfind xmlns:D="DAV:">'
                b'<D:allprop/></D:propfind>')
        res, data = self.request('PROPFIND', '/', body=body, headers={'Depth': '0'})
        self.assertEqual(res.status, 207)
        self.assertTrue(res.getheader('Content-Type').startswith('application/xml'))

    def test_propfind_missing(self):
        res, body = self.request('PROPFIND', '/nothing', headers={'Depth': '0'})
        self.assertEqual(res.status, 404)

    def test_proppatch(self):
        self.write('p.txt', b'x')
        body = (b'<?xml version="1.0"?><D:propertyupdate xmlns:D="DAV:">'
                b'<D:set><D:prop><D:displayname>x</D:displayname></D:prop></D:set>'
                b'</D:propertyupdate>')
        res, data = self.request('PROPPATCH', '/p.txt', body=body)
        self.assertEqual(res.status, 207)
        self.assertIn(b'HTTP/1.1 200 OK', data)
        self.assertEqual(self.hrefs(data), ['/p.txt'])


class TestCopyMove(ServerTestCase):

    def dest(self, path):
        return 'http://127.0.0.1:%d%s' % (self.server.port, path)

    def test_move_absolute_destination(self):
        self.write('a.txt', b'moved')
        res, body = self.request('MOVE', '/a.txt', headers={
            'Destination': self.dest('/dir/b.txt')})
        self.assertEqual(res.status, 201)
        self.assertFalse(os.path.exists(self.local('a.txt')))
        with open(self.local('dir', 'b.txt'), 'rb') as fp:
            self.assertEqual(fp.read(), b'moved')

    def test_move_relative_destination(self):
        self.write('a.txt', b'x')
        res, body = self.request('MOVE', '/a.txt', headers={'Destination': '/c%20d.txt'})
        self.assertEqual(res.status, 201)
        self.assertTrue(os.path.exists(self.local('c d.txt')))

    def test_copy_then_delete(self):
        self.write('src/f.txt', b'copied')
        res, body = self.request('COPY', '/src', headers={'Destination': self.dest('/dst')})
        self.assertEqual(res.status, 201)
        self.assertTrue(os.path.exists(self.local('src', 'f.txt')))
        with open(self.local('dst', 'f.txt'), 'rb') as fp:
            self.assertEqual(fp.read(), b'copied')

        res, body = self.request('DELETE', '/src')
        self.assertEqual(res.status, 204)
        self.assertTrue(os.path.exists(self.local('dst', 'f.txt')))

    def test_missing_destination(self):
        self.write('a.txt', b'x')
        res, body = self.request('MOVE', '/a.txt')
        self.assertEqual(res.status, 400)
        res, body = self.request('COPY', '/a.txt')
        self.assertEqual(res.status, 400)

    def test_missing_source(self):
        res, body = self.request('COPY', '/nope', headers={'Destination': '/x'})
        self.assertEqual(res.status, 404)

    def test_move_onto_parent(self):
        self.write('d/a.txt', b'a')
        self.write('d/other.txt', b'o')
        res, body = self.request('MOVE', '/d/a.txt', headers={'Destination': self.dest('/d')})
        self.assertEqual(res.status, 403)
        res, body = self.request('COPY', '/d/a.txt', headers={'Destination': self.dest('/d')})
        self.assertEqual(res.status, 403)
        self.assertTrue(os.path.exists(self.local('d', 'a.txt')))
        self.assertTrue(os.path.exists(self.local('d', 'other.txt')))

    def test_move_onto_root(self):
        self.write('x.txt', b'x')
        for method in ('MOVE', 'COPY'):
            res, body = self.request(method, '/x.txt', headers={'Destination': self.dest('/')})
            self.assertEqual(res.status, 403)
        self.assertTrue(os.path.isdir(self.root))
        self.assertTrue(os.path.exists(self.local('x.txt')))

    def test_destination_outside_root(self):
        self.write('a.txt', b'x')
        res, body = self.request('MOVE', '/a.txt', headers={
            'Destination': self.dest('/../escaped.txt')})
        self.assertEqual(res.status, 403)
        self.assertTrue(os.path.exists(self.local('a.txt')))


class TestAnonymous(ServerTestCase):

    config = {'noauth': True}

    def test_no_credentials_needed(self):
        self.write('open.txt', b'open')
        res, body = self.request('GET', '/open.txt', auth=False)
        self.assertEqual(res.status, 200)
        self.assertEqual(body, b'open')


class TestWhitelist(ServerTestCase):

    config = {'ip_whitelist': '10.0.0.0/8'}

    def test_refused(self):
        res, body = self.request('GET', '/')
        self.assertEqual(res.status, 403)
        self.assertEqual(body, b'IP not allowed')


class TestWhitelistLocal(ServerTestCase):

    config = {'ip_whitelist': '127.0.0.0/8'}

    def test_allowed(self):
        res, body = self.request('GET', '/')
        self.assertEqual(res.status, 200)


if __name__ == '__main__':
    unittest.main()
