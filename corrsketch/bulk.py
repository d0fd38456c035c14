import logging
from collections.abc import Iterable

from corrsketch.column import ColumnPair
from corrsketch.estimate import Estimate
from corrsketch.sketch import CorrelationSketch, FrozenCorrelationSketch

logger = logging.getLogger(__name__)


def compute_sketches(pairs, config=None):
    '''Helper method to compute correlation sketches in bulk, all sharing
    the same configuration.

    Args:
        pairs (iterable): Iterable of :class:`corrsketch.column.ColumnPair`
        config (SketchConfig): The configuration used for all sketches
    Returns:
        list: the sketches, frozen, in the order of `pairs`.
    '''
    return list(compute_sketches_generator(pairs, config))


def compute_sketches_generator(pairs, config=None):
    '''Helper method to compute correlation sketches in bulk. This method
    returns a generator for streaming computation.

    Args:
        pairs (iterable): Iterable of :class:`corrsketch.column.ColumnPair`
        config (SketchConfig): The configuration used for all sketches
    '''
    if not isinstance(pairs, Iterable):
        raise TypeError(f'Expecting iterable, given: {type(pairs)}')
    for pair in pairs:
        if not isinstance(pair, ColumnPair):
            raise TypeError(f'Expecting ColumnPair, given: {type(pair)}')
        logger.debug("Sketching column %s (%d rows)", pair.id, len(pair))
        yield CorrelationSketch.from_column_pair(pair, config).freeze()


def correlate_many(query, candidates, estimator=None):
    '''Score many candidate sketches against a query sketch.

    A candidate whose estimate fails is logged and reported with a NaN
    estimate, so one bad column does not abort the whole batch.

    Args:
        query: the query sketch, frozen or not.
        candidates (iterable): the candidate sketches.
        estimator: overrides the estimator of the query sketch.
    Yields:
        tuple: the position of the candidate and its :class:`Estimate`.
    '''
    if isinstance(query, CorrelationSketch):
        query = query.freeze()
    for i, candidate in enumerate(candidates):
        if isinstance(candidate, CorrelationSketch):
            candidate = candidate.freeze()
        if not isinstance(candidate, FrozenCorrelationSketch):
            raise TypeError(f'Expecting a correlation sketch, given: {type(candidate)}')
        try:
            yield i, query.correlation_to(candidate, estimator)
        except (ArithmeticError, ValueError) as e:
            logger.warning("Failed to estimate the correlation of candidate %d: %s", i, e)
            yield i, Estimate.nan()
