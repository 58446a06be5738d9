import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path so tests can import `dx_core`
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dx_core import io_utils  # noqa: E402


ELECTION_CSV = (
    "state,state_po,year,candidate,candidatevotes,totalvotes,party_simplified,district\n"
    "OHIO,OH,2020,BIDEN,400,1000,DEMOCRAT,0\n"
    "OHIO,OH,2020,TRUMP,590,1000,REPUBLICAN,0\n"
    "OHIO,OH,2020,JORGENSEN,5,1000,LIBERTARIAN,0\n"
    "OHIO,OH,2020,HAWKINS,5,1000,,0\n"
    "TEXAS,TX,2020,BIDEN,60,100,DEMOCRAT,0\n"
    "TEXAS,TX,2020,TRUMP,40,100,REPUBLICAN,0\n"
    "OHIO,OH,2016,CLINTON,450,1000,DEMOCRAT,0\n"
    "OHIO,OH,2016,TRUMP,550,1000,REPUBLICAN,0\n"
)

EV_CSV = (
    "County,City,Model Year,Make,Model,Electric Vehicle Type,"
    "Clean Alternative Fuel Vehicle (CAFV) Eligibility,Electric Range,VehicleLocation\n"
    "King,Seattle,2020,TESLA,MODEL 3,BEV,Clean Alternative Fuel Vehicle Eligible,220,POINT (-122.3 47.6)\n"
    "King,Seattle,2020,TESLA,MODEL 3,BEV,Clean Alternative Fuel Vehicle Eligible,240,POINT (-122.3 47.6)\n"
    "King,Bellevue,2021,TESLA,MODEL 3,BEV,Eligibility unknown as battery range has not been researched,0,POINT (-122.2 47.61)\n"
    "Pierce,Tacoma,2021,TESLA,MODEL 3,BEV,Eligibility unknown as battery range has not been researched,0,\n"
    "Pierce,Tacoma,2022,TESLA,MODEL 3,BEV,Eligibility unknown as battery range has not been researched,0,\n"
    "King,Seattle,2015,NISSAN,LEAF,BEV,Clean Alternative Fuel Vehicle Eligible,84,\n"
    "Snohomish,Everett,2013,CHEVROLET,VOLT,PHEV,Clean Alternative Fuel Vehicle Eligible,38,\n"
    "King,Seattle,2008,TESLA,ROADSTER,BEV,Clean Alternative Fuel Vehicle Eligible,220,\n"
    "King,Seattle,2019,,,PHEV,Not eligible due to low battery range,25,\n"
)

BORDER_CSV = (
    "Port Name,State,Port Code,Border,Date,Measure,Value,Latitude,Longitude\n"
    "El Paso,Texas,2402,US-Mexico Border,01/01/2022 12:00:00 AM,Pedestrians,100,31.76,-106.45\n"
    "El Paso,Texas,2402,US-Mexico Border,Jan 2022,Trucks,50,31.76,-106.45\n"
    "El Paso,Texas,2402,US-Mexico Border,02/01/2022 12:00:00 AM,Pedestrians,120,31.76,-106.45\n"
    "Blaine,Washington,3004,US-Canada Border,02/01/2022 12:00:00 AM,Personal Vehicles,80,49.0,-122.75\n"
    "Blaine,Washington,3004,US-Canada Border,03/01/2022 12:00:00 AM,Personal Vehicles,abc,49.0,-122.75\n"
    "Blaine,Washington,3004,US-Canada Border,not a date,Trucks,30,49.0,-122.75\n"
    "Blaine,Washington,3004,US-Canada Border,12/01/2021 12:00:00 AM,Trucks,10,,\n"
)


@pytest.fixture
def election_records():
    return io_utils.normalize_election_records(io_utils.parse_csv(ELECTION_CSV))


@pytest.fixture
def ev_records():
    return io_utils.parse_csv(EV_CSV)


@pytest.fixture
def border_records():
    return io_utils.parse_csv(BORDER_CSV)
