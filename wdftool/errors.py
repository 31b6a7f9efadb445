class WdfError(Exception):
    def __init__(self, message, offset=None, uid=None):
        Exception.__init__(self, message)
        self.message = message
        self.offset = offset
        self.uid = uid

    def __str__(self):
        context = []
        if self.uid is not None:
            context.append("uid 0x%08x" % self.uid)
        if self.offset is not None:
            context.append("offset 0x%x" % self.offset)
        if not context:
            return self.message
        return "%s (%s)" % (self.message, ", ".join(context))

class ReadError(WdfError):
    pass

class FormatError(WdfError):
    pass

class BadMagic(FormatError):
    pass

class NotFoundError(FormatError, KeyError):
    # KeyError quotes its argument, keep the plain message
    __str__ = WdfError.__str__

class DecodeError(WdfError):
    pass

__all__ = ["WdfError", "ReadError", "FormatError", "BadMagic", "NotFoundError", "DecodeError"]
