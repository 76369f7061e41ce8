#Textbook sorters used by the crossover benchmark

def insertion_sort(a):
    """
    Classic shift-based insertion sort.

    Sorts `a` in place and returns it, so it can be used both as a
    standalone sorter and as the small-slice finisher inside hybrid_sort.
    - Best case O(n): already sorted input never enters the shift loop.
    - Worst case O(n^2): reverse sorted input shifts every element.
    - Stable: equal keys are never shifted past each other.
    """
    for i in range(1, len(a)):
        key = a[i]
        j = i - 1
        while j >= 0 and a[j] > key:
            a[j + 1] = a[j]
            j -= 1
        a[j + 1] = key
    return a


def merge(left, right):
    """
    Merge two sorted lists into a new sorted list.

    On equal heads the left element is taken first, which keeps the
    relative order of equal keys (stability).
    """
    res = []
    i = j = 0
    nl, nr = len(left), len(right)
    while i < nl and j < nr:
        if left[i] <= right[j]:
            res.append(left[i])
            i += 1
        else:
            res.append(right[j])
            j += 1
    res.extend(left[i:])
    res.extend(right[j:])
    return res


def merge_sort(a):
    """
    Top-down merge sort. Never mutates `a`; always returns a new list.

    The split point is len(a) // 2, so for odd lengths the right half
    holds the extra element.
    """
    if len(a) <= 1:
        return list(a)
    m = len(a) // 2
    return merge(merge_sort(a[:m]), merge_sort(a[m:]))


def hybrid_sort(a, n0):
    """
    Merge sort whose base case switches to insertion sort.

    Any slice of length <= n0 is finished with insertion_sort instead of
    being split further.

    - n0 == 0 behaves exactly like merge_sort (the recursion still bottoms
      out at length 1, otherwise a single element would be split forever).
    - n0 >= len(a) behaves exactly like insertion_sort on a copy.

    Args:
        a: Sequence of comparable elements (not mutated)
        n0: Non-negative crossover threshold

    Returns:
        New sorted list
    """
    if n0 < 0:
        raise ValueError("n0 must be non-negative")
    if len(a) <= max(n0, 1):
        return insertion_sort(list(a))
    m = len(a) // 2
    return merge(hybrid_sort(a[:m], n0), hybrid_sort(a[m:], n0))


def make_hybrid(n0):
    """Freeze a threshold into a one-argument sorter."""
    def f(a):
        return hybrid_sort(a, n0)
    f.n0 = n0
    return f


__all__ = [
    'insertion_sort',
    'merge',
    'merge_sort',
    'hybrid_sort',
    'make_hybrid',
]
