import xml.dom.minidom
domimpl = xml.dom.minidom.getDOMImplementation()

import logging
import urllib.parse

from . import utils
from .errors import DAV_Forbidden

log = logging.getLogger(__name__)


def parse_depth(value):
    """ normalize a Depth header to 0 or 1

    A missing header means 1. "infinity" is refused as we never walk
    deeper than the immediate children.
    """
    if value is None:
        return 1
    value = value.strip()
    if value == '0':
        return 0
    if value.lower() == 'infinity':
        raise DAV_Forbidden('Depth infinity is not supported')
    return 1


def finite_depth_error():
    """ error body for a refused Depth: infinity request """
    doc = domimpl.createDocument(None, "error", None)
    root = doc.documentElement
    root.setAttribute("xmlns:D", "DAV:")
    root.tagName = "D:error"
    root.appendChild(doc.createElement("D:propfind-finite-depth"))
    return doc.toxml(encoding="utf-8")


class PROPFIND:
    """
    Build the Multi-Status response for a PROPFIND request

    Every response element reports the same set of live properties:
    displayname, getlastmodified and resourcetype, plus
    getcontentlength and getcontenttype for non-collections.
    """

    def __init__(self, uri, dataclass, depth):
        self._uri = urllib.parse.urlsplit(uri).path or '/'
        self._dataclass = dataclass
        self._depth = parse_depth(depth)

    def createResponse(self, filename):
        """ return the multistatus document for filename as bytes """
        dc = self._dataclass
        resource = dc.get_resource(filename)

        doc = domimpl.createDocument(None, "multistatus", None)
        ms = doc.documentElement
        ms.setAttribute("xmlns:D", "DAV:")
        ms.tagName = 'D:multistatus'

        ms.appendChild(self.mk_response(doc, self._uri, resource))

        if self._depth and resource.is_collection:
            for child in dc.get_childs(filename):
                href = utils.join_href(self._uri, urllib.parse.quote(child.displayname))
                ms.appendChild(self.mk_response(doc, href, child))

        return doc.toxml(encoding="utf-8")

    def mk_response(self, doc, href, resource):
        """ one <D:response> element for resource """
        re = doc.createElement("D:response")

        hr = doc.createElement("D:href")
        hr.appendChild(doc.createTextNode(href))
        re.appendChild(hr)

        ps = doc.createElement("D:propstat")
        gp = doc.createElement("D:prop")

        self._text_prop(doc, gp, "displayname", resource.displayname)
        self._text_prop(doc, gp, "getlastmodified",
                        self._dataclass.get_lastmodified(resource))

        rt = doc.createElement("D:resourcetype")
        if resource.is_collection:
            rt.appendChild(doc.createElement("D:collection"))
        gp.appendChild(rt)

        if not resource.is_collection:
            self._text_prop(doc, gp, "getcontentlength", str(resource.size))
            self._text_prop(doc, gp, "getcontenttype", resource.content_type)

        ps.appendChild(gp)

        s = doc.createElement("D:status")
        s.appendChild(doc.createTextNode(utils.gen_estring(200)))
        ps.appendChild(s)

        re.appendChild(ps)
        return re

    def _text_prop(self, doc, parent, name, value):
        pe = doc.createElement("D:" + name)
        pe.appendChild(doc.createTextNode(value))
        parent.appendChild(pe)
