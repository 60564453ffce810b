"""
Tests for solar yield profiles and providers.
"""

import pandas as pd
import pytest

from pv_feasibility.errors import ValidationError
from pv_feasibility.infrastructure.weather import FileSolarYieldProvider, SolarYieldProfile


def pvgis_response(values):
    """Minimal PVGIS PVcalc response for a 1 kWp system."""
    return {
        'inputs': {'location': {'latitude': 36.8, 'longitude': 10.18}},
        'outputs': {
            'monthly': {
                'fixed': [
                    {'month': month, 'E_d': value / 30, 'E_m': value, 'SD_m': 5.0}
                    for month, value in enumerate(values, start=1)
                ],
            },
            'totals': {'fixed': {'E_y': sum(values)}},
        },
    }


class TestSolarYieldProfile:
    """Test profile construction and validation."""

    def test_from_monthly(self, monthly_yield):
        profile = SolarYieldProfile.from_monthly(monthly_yield)
        assert profile.annual_kwh_per_kwp == 1800.0
        assert profile.monthly_kwh_per_kwp[6] == 200.0
        assert profile.source == "manual"

    def test_immutable(self, solar_yield):
        with pytest.raises(AttributeError):
            solar_yield.annual_kwh_per_kwp = 2000

    def test_wrong_month_count(self):
        with pytest.raises(ValidationError):
            SolarYieldProfile.from_monthly([150.0] * 11)

    def test_negative_yield(self, monthly_yield):
        monthly_yield[0] = -1.0
        with pytest.raises(ValidationError):
            SolarYieldProfile.from_monthly(monthly_yield)

    def test_to_dataframe(self, solar_yield):
        df = solar_yield.to_dataframe()
        assert list(df.index) == list(range(1, 13))
        assert df['yield_kwh_per_kwp'].sum() == pytest.approx(1800.0)


class TestPVGISParsing:
    """Test parsing of PVGIS monthly output."""

    def test_full_response(self, monthly_yield):
        values = [v + 0.4 for v in monthly_yield]
        profile = SolarYieldProfile.from_pvgis_monthly(pvgis_response(values))

        assert profile.monthly_kwh_per_kwp == tuple(values)
        assert profile.annual_kwh_per_kwp == 1805.0  # rounded to whole kWh
        assert profile.latitude == 36.8
        assert profile.longitude == 10.18
        assert profile.source == "pvgis"

    def test_records_only(self, monthly_yield):
        records = pvgis_response(monthly_yield)['outputs']['monthly']['fixed']
        profile = SolarYieldProfile.from_pvgis_monthly(records, latitude=35.0, longitude=9.0)
        assert profile.annual_kwh_per_kwp == 1800.0
        assert profile.latitude == 35.0

    def test_missing_block(self):
        with pytest.raises(ValidationError):
            SolarYieldProfile.from_pvgis_monthly({'outputs': {}})

    def test_missing_month(self, monthly_yield):
        records = pvgis_response(monthly_yield)['outputs']['monthly']['fixed'][:11]
        with pytest.raises(ValidationError):
            SolarYieldProfile.from_pvgis_monthly(records)


class TestCsvLoading:
    """Test CSV-backed profiles and the file provider."""

    def test_from_csv(self, yield_csv):
        profile = SolarYieldProfile.from_csv(yield_csv)
        assert profile.annual_kwh_per_kwp == 1800.0
        assert profile.source == "file"

    def test_unsorted_rows(self, tmp_path, monthly_yield):
        path = tmp_path / "unsorted.csv"
        pd.DataFrame({
            'month': list(range(12, 0, -1)),
            'yield_kwh_per_kwp': list(reversed(monthly_yield)),
        }).to_csv(path, index=False)

        profile = SolarYieldProfile.from_csv(path)

        assert profile.monthly_kwh_per_kwp == tuple(monthly_yield)

    def test_missing_column(self, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame({'month': range(1, 13), 'kwh': [100.0] * 12}).to_csv(path, index=False)
        with pytest.raises(ValidationError):
            SolarYieldProfile.from_csv(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SolarYieldProfile.from_csv(tmp_path / "missing.csv")

    def test_file_provider(self, yield_csv):
        provider = FileSolarYieldProvider(yield_csv)
        profile = provider.fetch(36.8, 10.18)
        assert profile.latitude == 36.8
        assert profile.longitude == 10.18
        assert profile.annual_kwh_per_kwp == 1800.0
