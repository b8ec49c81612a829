class RunnerError(Exception):
    exit_code = 1

    def __init__(self, fmt, *args):
        if fmt is None:
            msg = ""
        elif not args:
            msg = "%s" % fmt
        else:
            msg = fmt % args
        super().__init__(msg)


class UsageError(RunnerError):
    pass


class SocketError(RunnerError):
    pass


class ResolutionError(RunnerError):
    pass


class ConnectError(RunnerError):
    pass


class WriteError(RunnerError):
    pass


class ReadError(RunnerError):
    pass


class CapacityError(RunnerError):
    pass
