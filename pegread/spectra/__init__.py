class Scan(object):
    def __init__(self, x, abn, name='', source=None):
        assert len(x) == len(abn)
        self.x, self.abn = x, abn
        self.name = name
        self.source = source
