import time

from xml.dom import minidom
from http.server import BaseHTTPRequestHandler

from .constants import DAV_NAMESPACE

def gen_estring(ecode):
    """ generate a status line for a multistatus element """
    ec=int(ecode)
    if ec in BaseHTTPRequestHandler.responses:
        return "HTTP/1.1 %s %s" %(ec, BaseHTTPRequestHandler.responses[ec][0])
    else:
        return "HTTP/1.1 %s" %(ec)

def parse_proppatch(xml_doc):
    """
    Parse a PROPPATCH propertyupdate XML document

    Returns a list of tuples: [(action, namespace, propname), ...]
    where action is 'set' or 'remove', in document order.
    """
    doc = minidom.parseString(xml_doc)
    operations = []

    updates = doc.getElementsByTagNameNS(DAV_NAMESPACE, "propertyupdate")
    if not updates:
        return operations

    for child in updates[0].childNodes:
        if child.nodeType != minidom.Node.ELEMENT_NODE:
            continue
        if child.namespaceURI != DAV_NAMESPACE or child.localName not in ('set', 'remove'):
            continue

        for prop_elem in child.getElementsByTagNameNS(DAV_NAMESPACE, "prop"):
            for e in prop_elem.childNodes:
                if e.nodeType != minidom.Node.ELEMENT_NODE:
                    continue
                operations.append((child.localName, e.namespaceURI, e.localName))

    return operations

def join_href(parent, name):
    """ append name to parent with exactly one slash in between """
    return parent.rstrip('/') + '/' + name.lstrip('/')

# taken from App.Common

weekday_abbr = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
monthname    = [None, 'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

def rfc1123_date(ts=None):
    # Return an RFC 1123 format date string, required for
    # use in HTTP Date headers per RFC 2616.
    # 'Fri, 10 Nov 2000 16:21:09 GMT'
    if ts is None: ts=time.time()
    year, month, day, hh, mm, ss, wd, y, z = time.gmtime(ts)
    return "%s, %02d %3s %4d %02d:%02d:%02d GMT" % (weekday_abbr[wd],
                                                    day, monthname[month],
                                                    year,
                                                    hh, mm, ss)
