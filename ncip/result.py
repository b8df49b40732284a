class Result(object):
    """The outcome of an operation that either produces a value or a
    Problem explaining why it couldn't.

    Use Result.ok() and Result.err() to create one. Exactly one of
    `value` and `error` is available; asking for the other raises
    ValueError.
    """

    def __init__(self, value=None, error=None, is_ok=True):
        self._value = value
        self._error = error
        self._is_ok = is_ok

    @classmethod
    def ok(cls, value):
        return cls(value=value, is_ok=True)

    @classmethod
    def err(cls, error):
        if error is None:
            raise ValueError("An error Result must carry an error.")
        return cls(error=error, is_ok=False)

    @property
    def is_ok(self):
        return self._is_ok

    @property
    def is_err(self):
        return not self._is_ok

    @property
    def value(self):
        if not self._is_ok:
            raise ValueError("Called value on Result.err")
        return self._value

    @property
    def error(self):
        if self._is_ok:
            raise ValueError("Called error on Result.ok")
        return self._error

    def __eq__(self, other):
        if not isinstance(other, Result):
            return False
        return (self._is_ok, self._value, self._error) == (
            other._is_ok, other._value, other._error
        )

    def __repr__(self):
        if self._is_ok:
            return "<Result.ok(%r)>" % (self._value,)
        return "<Result.err(%r)>" % (self._error,)
