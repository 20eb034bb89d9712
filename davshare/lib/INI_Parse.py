from configparser import ConfigParser

TRUE_VALUES = ('1', 'yes', 'true', 'on')


class Configuration:
    def __init__ (self, fileName):
        cp = ConfigParser(interpolation=None)
        with open(fileName, encoding='utf-8') as fp:
            cp.read_file(fp)
        self.__parser = cp
        self.fileName = fileName

    def __getattr__ (self, name):
        if name in self.__parser.sections():
            return Section(name, self.__parser)
        else:
            return None

    def __str__ (self):
        p = self.__parser
        result = []
        result.append('<Configuration from %s>' % self.fileName)
        for s in p.sections():
            result.append('[%s]' % s)
            for o in p.options(s):
                result.append('%s=%s' % (o, p.get(s, o)))
        return '\n'.join(result)

class Section:
    def __init__ (self, name, parser):
        self.name = name
        self.__parser = parser

    def __getattr__ (self, name):
        if not self.__parser.has_option(self.name, name):
            raise AttributeError(name)
        return self.__parser.get(self.name, name)

    def getboolean(self, name):
        if name not in self:
            return False
        return self.__parser.getboolean(self.name, name)

    def getint(self, name, default=0):
        if name not in self:
            return default
        return self.__parser.getint(self.name, name)

    def __contains__(self, name):
        return self.__parser.has_option(self.name, name)

    def get(self, name, default):
        if name in self:
            return self.__getattr__(name)
        else:
            return default


def setupDummyConfig(**kw):
    """ pack keyword options into the same shape as a Configuration """

    class DummyConfigDAV:
        def __init__(self, **kw):
            self.__dict__.update(**kw)

        def getboolean(self, name):
            return (str(getattr(self, name, 0)).lower() in TRUE_VALUES)

        def getint(self, name, default=0):
            value = getattr(self, name, None)
            if value is None or value == '':
                return default
            return int(value)

        def __contains__(self, name):
            return name in self.__dict__

        def get(self, name, default):
            return getattr(self, name, default)

    class DummyConfig:
        DAV = DummyConfigDAV(**kw)

    return DummyConfig()
