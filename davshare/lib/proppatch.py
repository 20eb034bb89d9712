import xml.dom.minidom
domimpl = xml.dom.minidom.getDOMImplementation()

import logging
import urllib.parse
from xml.parsers.expat import ExpatError

from . import utils
from .constants import DAV_NAMESPACE

log = logging.getLogger(__name__)


class PROPPATCH:
    """
    Acknowledge a PROPPATCH propertyupdate request

    There is no property store, so nothing is persisted. The request
    is answered with a single 200 OK propstat listing the property
    names found in the body. A missing or broken body is acknowledged
    with an empty <D:prop/>.
    """

    def __init__(self, uri, body):
        self._uri = urllib.parse.urlsplit(uri).path or '/'
        self._operations = []

        if body:
            try:
                self._operations = utils.parse_proppatch(body)
            except ExpatError as e:
                log.info('PROPPATCH: ignoring unparsable body: %s', e)

    def create_response(self):
        """
        Create the Multi-Status XML response

        <?xml version="1.0" encoding="utf-8"?>
        <D:multistatus xmlns:D="DAV:">
          <D:response>
            <D:href>/resource</D:href>
            <D:propstat>
              <D:prop><ns0:propname/></D:prop>
              <D:status>HTTP/1.1 200 OK</D:status>
            </D:propstat>
          </D:response>
        </D:multistatus>
        """
        doc = domimpl.createDocument(None, "multistatus", None)
        ms = doc.documentElement
        ms.setAttribute("xmlns:D", "DAV:")
        ms.tagName = 'D:multistatus'

        # one prefix per foreign namespace
        namespaces = {}
        for action, ns, propname in self._operations:
            if ns and ns != DAV_NAMESPACE and ns not in namespaces:
                prefix = "ns%d" % len(namespaces)
                namespaces[ns] = prefix
                ms.setAttribute("xmlns:%s" % prefix, ns)

        re = doc.createElement("D:response")

        href = doc.createElement("D:href")
        href.appendChild(doc.createTextNode(self._uri))
        re.appendChild(href)

        ps = doc.createElement("D:propstat")
        gp = doc.createElement("D:prop")
        seen = set()
        for action, ns, propname in self._operations:
            if (ns, propname) in seen:
                continue
            seen.add((ns, propname))
            if ns == DAV_NAMESPACE:
                pe = doc.createElement("D:" + propname)
            elif ns in namespaces:
                pe = doc.createElement(namespaces[ns] + ":" + propname)
            else:
                pe = doc.createElement(propname)
            gp.appendChild(pe)
        ps.appendChild(gp)

        s = doc.createElement("D:status")
        s.appendChild(doc.createTextNode(utils.gen_estring(200)))
        ps.appendChild(s)

        re.appendChild(ps)
        ms.appendChild(re)

        return doc.toxml(encoding="utf-8")
