"""
Unit tests for the lazy package exports.
"""

import pytest

import newman_summary
import newman_summary.common as common
import newman_summary.models
from newman_summary.common.security import SecretRedactor
from newman_summary.pipeline import SummaryPipeline


def test_lazy_exports_resolve():
    assert newman_summary.SummaryPipeline is SummaryPipeline
    assert common.SecretRedactor is SecretRedactor
    assert "RunContext" in dir(newman_summary)


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        newman_summary.DoesNotExist


@pytest.mark.parametrize(
    "member",
    [
        newman_summary.models.CollectionSummary.metric,
        newman_summary.models.CollectionSummary.metric_number,
        newman_summary.models.CollectionSummary.detail_source,
        newman_summary.models.GroupedFailure.total,
        newman_summary.models.AggregatedCollection,
        newman_summary.models.AggregatedReport.show_skipped,
        newman_summary.models.AggregatedReport.failing,
    ],
)
def test_model_members_documented(member):
    assert member.__doc__ and member.__doc__.strip()
