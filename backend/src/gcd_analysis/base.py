class Window:
    def __init__(self, start, end=None):
        self.start = start
        self.end = end

    def __repr__(self):
        return f"{self.__class__.__name__}({self.start}, {self.end})"


def range_overlap(a, b):
    return max(0, min(a[1], b[1]) - max(a[0], b[0]))


class BasePreprocessor:
    def preprocess_event(self, event):
        pass


class BaseAnalyzer:
    def add_event(self, event):
        pass

    def report(self):
        return {}

    def print(self):
        pass
