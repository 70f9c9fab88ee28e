# pricing/services/tax_rates.py

"""
Local sales-tax lookup used when Stripe Tax is switched off or reports zero.

Lookup order: Bay Area ZIP code, exact state name, state name inside the
location string, state abbreviation as a whole word, then the default rate.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Any, Dict, Optional

from pricing.constants import DEFAULT_TAX_RATE
from pricing.utils.money import quantize_money, to_decimal

logger = logging.getLogger(__name__)

# ZIP -> (rate, city, county)
BAY_AREA_TAX_RATES = {
    # San Francisco County
    "94102": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94103": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94104": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94105": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94106": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94107": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94108": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94109": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94110": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94111": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94112": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94113": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94114": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94115": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94116": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94117": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94118": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94119": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94120": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94121": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94122": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94123": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94124": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94125": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94126": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94127": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94128": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94129": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94130": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94131": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94132": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94133": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94134": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94137": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94138": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94139": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94140": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94141": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94142": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94143": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94144": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94145": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94146": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94147": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94151": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94158": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94159": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94160": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94161": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94163": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94164": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94172": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94177": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    "94188": (Decimal("0.0863"), "San Francisco", "San Francisco"),
    # Alameda County
    "94501": (Decimal("0.1025"), "Alameda", "Alameda"),
    "94502": (Decimal("0.1025"), "Alameda", "Alameda"),
    "94536": (Decimal("0.1075"), "Fremont", "Alameda"),
    "94537": (Decimal("0.1075"), "Fremont", "Alameda"),
    "94538": (Decimal("0.1075"), "Fremont", "Alameda"),
    "94539": (Decimal("0.1075"), "Fremont", "Alameda"),
    "94541": (Decimal("0.1025"), "Hayward", "Alameda"),
    "94542": (Decimal("0.1025"), "Hayward", "Alameda"),
    "94544": (Decimal("0.1025"), "Hayward", "Alameda"),
    "94545": (Decimal("0.1025"), "Hayward", "Alameda"),
    "94546": (Decimal("0.0975"), "Castro Valley", "Alameda"),
    "94550": (Decimal("0.1025"), "Livermore", "Alameda"),
    "94551": (Decimal("0.1025"), "Livermore", "Alameda"),
    "94552": (Decimal("0.0975"), "Castro Valley", "Alameda"),
    "94555": (Decimal("0.0975"), "Fremont", "Alameda"),
    "94560": (Decimal("0.0975"), "Newark", "Alameda"),
    "94566": (Decimal("0.1025"), "Pleasanton", "Alameda"),
    "94568": (Decimal("0.1025"), "Dublin", "Alameda"),
    "94577": (Decimal("0.1025"), "San Leandro", "Alameda"),
    "94578": (Decimal("0.1025"), "San Leandro", "Alameda"),
    "94579": (Decimal("0.1025"), "San Leandro", "Alameda"),
    "94580": (Decimal("0.0975"), "San Lorenzo", "Alameda"),
    "94586": (Decimal("0.0975"), "Sunol", "Alameda"),
    "94587": (Decimal("0.0975"), "Union City", "Alameda"),
    "94588": (Decimal("0.1025"), "Pleasanton", "Alameda"),
    "94601": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94602": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94603": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94605": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94606": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94607": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94608": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94609": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94610": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94611": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94612": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94613": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94618": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94619": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94620": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94621": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94622": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94623": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94624": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94649": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94660": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94661": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94662": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94666": (Decimal("0.1075"), "Oakland", "Alameda"),
    "94701": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94702": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94703": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94704": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94705": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94706": (Decimal("0.1025"), "Albany", "Alameda"),
    "94707": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94708": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94709": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94710": (Decimal("0.1025"), "Berkeley", "Alameda"),
    "94720": (Decimal("0.1025"), "Berkeley", "Alameda"),
    # Contra Costa County
    "94505": (Decimal("0.0875"), "Discovery Bay", "Contra Costa"),
    "94506": (Decimal("0.0875"), "Danville", "Contra Costa"),
    "94507": (Decimal("0.0875"), "Alamo", "Contra Costa"),
    "94509": (Decimal("0.0875"), "Antioch", "Contra Costa"),
    "94511": (Decimal("0.0875"), "Atherton", "Contra Costa"),
    "94513": (Decimal("0.0875"), "Brentwood", "Contra Costa"),
    "94516": (Decimal("0.0875"), "Canyon", "Contra Costa"),
    "94517": (Decimal("0.0875"), "Clayton", "Contra Costa"),
    "94518": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94519": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94520": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94521": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94522": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94523": (Decimal("0.0875"), "Pleasant Hill", "Contra Costa"),
    "94524": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94525": (Decimal("0.0875"), "Clayton", "Contra Costa"),
    "94526": (Decimal("0.0875"), "Danville", "Contra Costa"),
    "94527": (Decimal("0.0875"), "Diablo", "Contra Costa"),
    "94528": (Decimal("0.0875"), "Diablo", "Contra Costa"),
    "94529": (Decimal("0.0875"), "Concord", "Contra Costa"),
    "94530": (Decimal("0.0875"), "El Cerrito", "Contra Costa"),
    "94531": (Decimal("0.0875"), "Greenbrae", "Contra Costa"),
    "94547": (Decimal("0.0875"), "Hercules", "Contra Costa"),
    "94548": (Decimal("0.0875"), "Knightsen", "Contra Costa"),
    "94549": (Decimal("0.0875"), "Lafayette", "Contra Costa"),
    "94553": (Decimal("0.0875"), "Martinez", "Contra Costa"),
    "94556": (Decimal("0.0875"), "Moraga", "Contra Costa"),
    "94561": (Decimal("0.0875"), "Oakley", "Contra Costa"),
    "94563": (Decimal("0.0875"), "Orinda", "Contra Costa"),
    "94564": (Decimal("0.0875"), "Pinole", "Contra Costa"),
    "94565": (Decimal("0.0875"), "Pittsburg", "Contra Costa"),
    "94569": (Decimal("0.0875"), "San Ramon", "Contra Costa"),
    "94572": (Decimal("0.0875"), "Rodeo", "Contra Costa"),
    "94575": (Decimal("0.0875"), "San Ramon", "Contra Costa"),
    "94583": (Decimal("0.0875"), "San Ramon", "Contra Costa"),
    "94595": (Decimal("0.0875"), "Walnut Creek", "Contra Costa"),
    "94596": (Decimal("0.0875"), "Walnut Creek", "Contra Costa"),
    "94597": (Decimal("0.0875"), "Walnut Creek", "Contra Costa"),
    "94598": (Decimal("0.0875"), "Walnut Creek", "Contra Costa"),
    "94801": (Decimal("0.0875"), "Richmond", "Contra Costa"),
    "94802": (Decimal("0.0875"), "Richmond", "Contra Costa"),
    "94803": (Decimal("0.0875"), "El Sobrante", "Contra Costa"),
    "94804": (Decimal("0.0875"), "Richmond", "Contra Costa"),
    "94805": (Decimal("0.0875"), "Richmond", "Contra Costa"),
    "94806": (Decimal("0.0875"), "San Pablo", "Contra Costa"),
    "94807": (Decimal("0.0875"), "Richmond", "Contra Costa"),
    "94808": (Decimal("0.0875"), "Richmond", "Contra Costa"),
    "94820": (Decimal("0.0875"), "El Cerrito", "Contra Costa"),
    "94850": (Decimal("0.0875"), "Crockett", "Contra Costa"),
    # Marin County
    "94901": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94903": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94904": (Decimal("0.0875"), "Greenbrae", "Marin"),
    "94912": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94913": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94914": (Decimal("0.0875"), "Greenbrae", "Marin"),
    "94915": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94920": (Decimal("0.0875"), "Belvedere", "Marin"),
    "94924": (Decimal("0.0875"), "Bolinas", "Marin"),
    "94925": (Decimal("0.0875"), "Corte Madera", "Marin"),
    "94929": (Decimal("0.0875"), "Dillon Beach", "Marin"),
    "94930": (Decimal("0.0875"), "Fairfax", "Marin"),
    "94933": (Decimal("0.0875"), "Forest Knolls", "Marin"),
    "94937": (Decimal("0.0875"), "Inverness", "Marin"),
    "94938": (Decimal("0.0875"), "Lagunitas", "Marin"),
    "94939": (Decimal("0.0875"), "Larkspur", "Marin"),
    "94940": (Decimal("0.0875"), "Marshall", "Marin"),
    "94941": (Decimal("0.0875"), "Mill Valley", "Marin"),
    "94942": (Decimal("0.0875"), "Mill Valley", "Marin"),
    "94945": (Decimal("0.0875"), "Novato", "Marin"),
    "94946": (Decimal("0.0875"), "Nicasio", "Marin"),
    "94947": (Decimal("0.0875"), "Novato", "Marin"),
    "94948": (Decimal("0.0875"), "Novato", "Marin"),
    "94949": (Decimal("0.0875"), "Novato", "Marin"),
    "94950": (Decimal("0.0875"), "Petaluma", "Marin"),
    "94956": (Decimal("0.0875"), "Point Reyes Station", "Marin"),
    "94957": (Decimal("0.0875"), "Ross", "Marin"),
    "94960": (Decimal("0.0875"), "San Anselmo", "Marin"),
    "94963": (Decimal("0.0875"), "San Geronimo", "Marin"),
    "94964": (Decimal("0.0875"), "San Geronimo", "Marin"),
    "94965": (Decimal("0.0875"), "Sausalito", "Marin"),
    "94966": (Decimal("0.0875"), "Sausalito", "Marin"),
    "94970": (Decimal("0.0875"), "Stinson Beach", "Marin"),
    "94971": (Decimal("0.0875"), "Tomales", "Marin"),
    "94973": (Decimal("0.0875"), "Woodacre", "Marin"),
    "94974": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94975": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94976": (Decimal("0.0875"), "San Rafael", "Marin"),
    "94977": (Decimal("0.0875"), "Lagunitas", "Marin"),
    "94978": (Decimal("0.0875"), "San Anselmo", "Marin"),
    "94979": (Decimal("0.0875"), "San Rafael", "Marin"),
    # Napa County
    "94503": (Decimal("0.0875"), "American Canyon", "Napa"),
    "94508": (Decimal("0.0875"), "Angwin", "Napa"),
    "94515": (Decimal("0.0875"), "Calistoga", "Napa"),
    "94558": (Decimal("0.0875"), "Napa", "Napa"),
    "94559": (Decimal("0.0875"), "Napa", "Napa"),
    "94562": (Decimal("0.0875"), "Oakville", "Napa"),
    "94567": (Decimal("0.0875"), "Pope Valley", "Napa"),
    "94573": (Decimal("0.0875"), "Rutherford", "Napa"),
    "94574": (Decimal("0.0875"), "St. Helena", "Napa"),
    "94581": (Decimal("0.0875"), "Deer Park", "Napa"),
    "94599": (Decimal("0.0875"), "Yountville", "Napa"),
    # San Mateo County
    "94002": (Decimal("0.0975"), "Belmont", "San Mateo"),
    "94005": (Decimal("0.0975"), "Brisbane", "San Mateo"),
    "94010": (Decimal("0.0975"), "Burlingame", "San Mateo"),
    "94011": (Decimal("0.0975"), "Burlingame", "San Mateo"),
    "94014": (Decimal("0.0975"), "Daly City", "San Mateo"),
    "94015": (Decimal("0.0975"), "Daly City", "San Mateo"),
    "94016": (Decimal("0.0975"), "Daly City", "San Mateo"),
    "94017": (Decimal("0.0975"), "Daly City", "San Mateo"),
    "94018": (Decimal("0.0975"), "Daly City", "San Mateo"),
    "94019": (Decimal("0.0975"), "Half Moon Bay", "San Mateo"),
    "94020": (Decimal("0.0975"), "Ladera", "San Mateo"),
    "94021": (Decimal("0.0975"), "Ladera", "San Mateo"),
    "94025": (Decimal("0.0975"), "Menlo Park", "San Mateo"),
    "94026": (Decimal("0.0975"), "Menlo Park", "San Mateo"),
    "94027": (Decimal("0.0975"), "Atherton", "San Mateo"),
    "94028": (Decimal("0.0975"), "Portola Valley", "San Mateo"),
    "94030": (Decimal("0.0975"), "Millbrae", "San Mateo"),
    "94037": (Decimal("0.0975"), "Montara", "San Mateo"),
    "94038": (Decimal("0.0975"), "Moss Beach", "San Mateo"),
    "94044": (Decimal("0.0975"), "Pacifica", "San Mateo"),
    "94060": (Decimal("0.0975"), "Pescadero", "San Mateo"),
    "94061": (Decimal("0.0975"), "Redwood City", "San Mateo"),
    "94062": (Decimal("0.0975"), "Woodside", "San Mateo"),
    "94063": (Decimal("0.0975"), "Redwood City", "San Mateo"),
    "94064": (Decimal("0.0975"), "Redwood City", "San Mateo"),
    "94065": (Decimal("0.0975"), "Redwood City", "San Mateo"),
    "94066": (Decimal("0.0975"), "San Bruno", "San Mateo"),
    "94070": (Decimal("0.0975"), "San Carlos", "San Mateo"),
    "94074": (Decimal("0.0975"), "San Gregorio", "San Mateo"),
    "94080": (Decimal("0.0975"), "South San Francisco", "San Mateo"),
    "94083": (Decimal("0.0975"), "South San Francisco", "San Mateo"),
    # Santa Clara County
    "94022": (Decimal("0.0913"), "Los Altos", "Santa Clara"),
    "94023": (Decimal("0.0913"), "Los Altos", "Santa Clara"),
    "94024": (Decimal("0.0913"), "Los Altos", "Santa Clara"),
    "94035": (Decimal("0.0913"), "Milpitas", "Santa Clara"),
    "94040": (Decimal("0.0913"), "Mountain View", "Santa Clara"),
    "94041": (Decimal("0.0913"), "Mountain View", "Santa Clara"),
    "94043": (Decimal("0.0913"), "Mountain View", "Santa Clara"),
    "94085": (Decimal("0.0913"), "Sunnyvale", "Santa Clara"),
    "94086": (Decimal("0.0913"), "Sunnyvale", "Santa Clara"),
    "94087": (Decimal("0.0913"), "Sunnyvale", "Santa Clara"),
    "94089": (Decimal("0.0913"), "Sunnyvale", "Santa Clara"),
    "94301": (Decimal("0.0838"), "Palo Alto", "Santa Clara"),
    "94302": (Decimal("0.0838"), "Palo Alto", "Santa Clara"),
    "94303": (Decimal("0.0838"), "Palo Alto", "Santa Clara"),
    "94304": (Decimal("0.0838"), "Palo Alto", "Santa Clara"),
    "94305": (Decimal("0.0838"), "Stanford", "Santa Clara"),
    "94306": (Decimal("0.0838"), "Palo Alto", "Santa Clara"),
    "95002": (Decimal("0.0863"), "Alviso", "Santa Clara"),
    "95008": (Decimal("0.0913"), "Campbell", "Santa Clara"),
    "95009": (Decimal("0.0913"), "Campbell", "Santa Clara"),
    "95014": (Decimal("0.0913"), "Cupertino", "Santa Clara"),
    "95015": (Decimal("0.0913"), "Cupertino", "Santa Clara"),
    "95020": (Decimal("0.0875"), "Gilroy", "Santa Clara"),
    "95021": (Decimal("0.0875"), "Gilroy", "Santa Clara"),
    "95030": (Decimal("0.0913"), "Los Gatos", "Santa Clara"),
    "95032": (Decimal("0.0913"), "Los Gatos", "Santa Clara"),
    "95033": (Decimal("0.0913"), "Los Gatos", "Santa Clara"),
    "95035": (Decimal("0.0913"), "Milpitas", "Santa Clara"),
    "95037": (Decimal("0.0875"), "Morgan Hill", "Santa Clara"),
    "95046": (Decimal("0.0875"), "San Martin", "Santa Clara"),
    "95050": (Decimal("0.0913"), "Santa Clara", "Santa Clara"),
    "95051": (Decimal("0.0913"), "Santa Clara", "Santa Clara"),
    "95054": (Decimal("0.0913"), "Santa Clara", "Santa Clara"),
    "95070": (Decimal("0.0913"), "Saratoga", "Santa Clara"),
    "95110": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95111": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95112": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95113": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95116": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95117": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95118": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95119": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95120": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95121": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95122": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95123": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95124": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95125": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95126": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95127": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95128": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95129": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95130": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95131": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95132": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95133": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95134": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95135": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95136": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95138": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95139": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95140": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95141": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    "95148": (Decimal("0.0863"), "San Jose", "Santa Clara"),
    # Solano County
    "94510": (Decimal("0.0875"), "Benicia", "Solano"),
    "94512": (Decimal("0.0875"), "Benicia", "Solano"),
    "94533": (Decimal("0.0875"), "Fairfield", "Solano"),
    "94534": (Decimal("0.0875"), "Fairfield", "Solano"),
    "94535": (Decimal("0.0875"), "Travis AFB", "Solano"),
    "94571": (Decimal("0.0875"), "Rio Vista", "Solano"),
    "94589": (Decimal("0.0875"), "Vallejo", "Solano"),
    "94590": (Decimal("0.0875"), "Vallejo", "Solano"),
    "94591": (Decimal("0.0875"), "Vallejo", "Solano"),
    "95616": (Decimal("0.0875"), "Dixon", "Solano"),
    "95688": (Decimal("0.0875"), "Vacaville", "Solano"),
    "95687": (Decimal("0.0875"), "Vacaville", "Solano"),
    # Sonoma County
    "95401": (Decimal("0.0875"), "Santa Rosa", "Sonoma"),
    "95403": (Decimal("0.0875"), "Santa Rosa", "Sonoma"),
    "95404": (Decimal("0.0875"), "Santa Rosa", "Sonoma"),
    "95405": (Decimal("0.0875"), "Santa Rosa", "Sonoma"),
    "95409": (Decimal("0.0875"), "Santa Rosa", "Sonoma"),
    "95410": (Decimal("0.0875"), "Albion", "Sonoma"),
    "95412": (Decimal("0.0875"), "Annapolis", "Sonoma"),
    "95415": (Decimal("0.0875"), "Boyes Hot Springs", "Sonoma"),
    "95419": (Decimal("0.0875"), "Cazadero", "Sonoma"),
    "95420": (Decimal("0.0875"), "Cloverdale", "Sonoma"),
    "95421": (Decimal("0.0875"), "Cloverdale", "Sonoma"),
    "95425": (Decimal("0.0875"), "Duncan Mills", "Sonoma"),
    "95436": (Decimal("0.0875"), "Guerneville", "Sonoma"),
    "95441": (Decimal("0.0875"), "Healdsburg", "Sonoma"),
    "95442": (Decimal("0.0875"), "Jenner", "Sonoma"),
    "95448": (Decimal("0.0875"), "Occidental", "Sonoma"),
    "94951": (Decimal("0.0875"), "Petaluma", "Sonoma"),
    "94952": (Decimal("0.0875"), "Petaluma", "Sonoma"),
    "94953": (Decimal("0.0875"), "Petaluma", "Sonoma"),
    "94954": (Decimal("0.0875"), "Petaluma", "Sonoma"),
    "94972": (Decimal("0.0875"), "Valley Ford", "Sonoma"),
    "95472": (Decimal("0.0875"), "Sebastopol", "Sonoma"),
    "95473": (Decimal("0.0875"), "Sebastopol", "Sonoma"),
    "95476": (Decimal("0.0875"), "Sonoma", "Sonoma"),
    "95486": (Decimal("0.0875"), "Windsor", "Sonoma"),
    "95492": (Decimal("0.0875"), "Watsonville", "Sonoma"),
}

STATE_TAX_RATES = {
    "california": (Decimal("0.0875"), "CA State Tax", "California"),
    "new york": (Decimal("0.08"), "NY State Tax", "New York"),
    "texas": (Decimal("0.0625"), "TX State Tax", "Texas"),
    "florida": (Decimal("0.06"), "FL State Tax", "Florida"),
    "nevada": (Decimal("0.0685"), "NV State Tax", "Nevada"),
    "washington": (Decimal("0.065"), "WA State Tax", "Washington"),
}

STATE_ABBREVIATIONS = {
    "ca": "california",
    "ny": "new york",
    "tx": "texas",
    "fl": "florida",
    "nv": "nevada",
    "wa": "washington",
}

_ZIP = re.compile(r"\b(\d{5})\b")


def _tax_data(rate: Decimal, description: str, jurisdiction: str) -> Dict[str, Any]:
    return {"rate": rate, "description": description, "jurisdiction": jurisdiction}


def _default_tax_data() -> Dict[str, Any]:
    return _tax_data(DEFAULT_TAX_RATE, "Default Tax", "Unknown")


def extract_zip(address: str | None) -> Optional[str]:
    if not address:
        return None
    match = _ZIP.search(address)
    return match.group(1) if match else None


def get_bay_area_tax_rate(zip_code: str | None) -> Optional[Dict[str, Any]]:
    entry = BAY_AREA_TAX_RATES.get(zip_code or "")
    if entry is None:
        return None
    rate, city, county = entry
    return _tax_data(rate, f"{city} Tax ({county} County)", f"{city}, {county} County")


def get_tax_rate_by_location(location: str | None) -> Dict[str, Any]:
    """
    Sales-tax rate for a free-form location string.

    Returns {'rate', 'description', 'jurisdiction'}.
    """
    if not location or not location.strip():
        logger.warning("No location provided for tax rate lookup, using default rate")
        return _default_tax_data()

    normalized = location.strip().lower()

    bay_area = get_bay_area_tax_rate(extract_zip(location))
    if bay_area:
        return bay_area

    if normalized in STATE_TAX_RATES:
        return _tax_data(*STATE_TAX_RATES[normalized])

    for state, entry in STATE_TAX_RATES.items():
        if state in normalized:
            return _tax_data(*entry)

    # Whole words only, so "ca" doesn't match "Africa"
    for word in re.split(r"[\s,]+", normalized):
        if word in STATE_ABBREVIATIONS:
            return _tax_data(*STATE_TAX_RATES[STATE_ABBREVIATIONS[word]])

    logger.warning(f"No tax rate found for location '{location}', using default rate")
    return _default_tax_data()


def calculate_local_tax(subtotal, location: str | None) -> Dict[str, Any]:
    """
    Tax on `subtotal` at the location's rate.

    Returns {'amount', 'rate', 'description', 'jurisdiction'}.
    """
    tax_data = get_tax_rate_by_location(location)
    amount = quantize_money(to_decimal(subtotal) * tax_data["rate"])
    return {"amount": amount, **tax_data}
