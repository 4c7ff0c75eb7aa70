"""Shared fixtures: small in-memory frames shaped like the raw archive."""

import pandas as pd
import pytest


@pytest.fixture()
def raw_events():
    """A handful of raw Storm Data rows covering each cleaning path.

    Row by row:
        0  TSTM WIND, CST, HHMM time               → kept
        1  TORNADO, "CSt" spelling, 12-hour time   → kept
        2  HAIL, UNK timezone                      → dropped (timezone)
        3  FLOOD, unparseable time                 → dropped (time)
        4  free-text label from 1995               → dropped (cutoff year)
        5  mixed-case label, lowercase "m" code    → kept
        6  LANDSLIDE → Debris Flow                 → kept
    """
    return pd.DataFrame(
        {
            "STATE__": [1.0] * 7,
            "EVTYPE": [
                "TSTM WIND",
                "TORNADO",
                "HAIL",
                "FLOOD",
                "TSTM WIND/HAIL",
                " Flash Flood ",
                "LANDSLIDE",
            ],
            "BGN_DATE": [
                "1/5/2008 0:00:00",
                "4/18/2010 0:00:00",
                "5/1/2009 0:00:00",
                "6/1/2011 0:00:00",
                "8/29/1995 0:00:00",
                "7/4/2012 0:00:00",
                "3/15/2012 0:00:00",
            ],
            "BGN_TIME": [
                "0130",
                "03:00:00 PM",
                "1200",
                "99:99",
                "0900",
                "14:30:00",
                "0800",
            ],
            "TIME_ZONE": ["CST", "CSt", "UNK", "EST", "CDT", "EDT", "PST"],
            "COUNTYNAME": ["X"] * 7,
            "FATALITIES": [0.0, 3.0, 0.0, 1.0, 2.0, 1.0, 0.0],
            "INJURIES": [2.0, 10.0, 1.0, 0.0, 5.0, 0.0, 0.0],
            "PROPDMG": [2.5, 1.0, 0.0, 4.0, 50.0, 5.0, 10.0],
            "PROPDMGEXP": ["K", "B", "0", "K", "K", "m", "K"],
            "CROPDMG": [0.0, 3.0, 0.0, 0.0, 0.0, 0.0, 0.0],
            "CROPDMGEXP": ["0", "M", "0", "0", None, None, "K"],
        }
    )


@pytest.fixture()
def tidy_events():
    """Tidy rows for two years, as read back from the tidy CSV."""
    return pd.DataFrame(
        {
            "timestamp": [
                "2008-01-05T07:30:00Z",
                "2008-03-01T12:00:00Z",
                "2008-06-10T18:00:00Z",
                "2008-07-01T00:00:00Z",
                "2009-02-02T10:00:00Z",
                "2009-05-05T20:00:00Z",
                "2009-08-08T08:00:00Z",
            ],
            "category": [
                "Tornado",
                "Flood",
                "Drought",
                "Tornado",
                "Excessive Heat",
                "Flood",
                "Tornado",
            ],
            "injuries": [10, 0, 0, 5, 20, 1, 3],
            "fatalities": [2, 1, 0, 0, 8, 0, 1],
            "property_damage": [1e6, 5e8, 0.0, 2e6, 0.0, 1e7, 5e5],
            "crop_damage": [0.0, 1e5, 3e8, 0.0, 1e6, 0.0, 0.0],
        }
    )
