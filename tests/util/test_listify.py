from ncip.util import listify


class TestListify(object):

    def test_listify(self):
        assert [] == listify(None)
        assert ["a"] == listify("a")
        assert [dict(a=1)] == listify(dict(a=1))
        assert ["a", "b"] == listify(("a", "b"))
        value = ["a"]
        assert value == listify(value)
