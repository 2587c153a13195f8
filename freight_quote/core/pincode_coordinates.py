"""
Pincode coordinates used by the local distance fallback.

The built-in table covers head post office pincodes of major cities. It can be
extended with a JSON file of the same shape ({"<pincode>": {"lat": .., "lng": ..}})
via PINCODE_COORDINATES_PATH.
"""
from functools import lru_cache
from typing import Dict, Optional
import json
import logging

logger = logging.getLogger(__name__)


PINCODE_COORDINATES: Dict[str, Dict[str, float]] = {
    # North
    "110001": {"lat": 28.6328, "lng": 77.2197},   # New Delhi GPO
    "110020": {"lat": 28.5494, "lng": 77.2684},   # Okhla
    "110037": {"lat": 28.5562, "lng": 77.1000},   # Delhi Airport
    "122001": {"lat": 28.4595, "lng": 77.0266},   # Gurugram
    "201301": {"lat": 28.5355, "lng": 77.3910},   # Noida
    "121001": {"lat": 28.4089, "lng": 77.3178},   # Faridabad
    "160017": {"lat": 30.7333, "lng": 76.7794},   # Chandigarh
    "141001": {"lat": 30.9010, "lng": 75.8573},   # Ludhiana
    "143001": {"lat": 31.6340, "lng": 74.8723},   # Amritsar
    "302001": {"lat": 26.9124, "lng": 75.7873},   # Jaipur
    "226001": {"lat": 26.8467, "lng": 80.9462},   # Lucknow
    "208001": {"lat": 26.4499, "lng": 80.3319},   # Kanpur
    "282001": {"lat": 27.1767, "lng": 78.0081},   # Agra
    "221001": {"lat": 25.3176, "lng": 82.9739},   # Varanasi
    "248001": {"lat": 30.3165, "lng": 78.0322},   # Dehradun
    "180001": {"lat": 32.7266, "lng": 74.8570},   # Jammu
    # West
    "400001": {"lat": 18.9388, "lng": 72.8354},   # Mumbai GPO
    "400070": {"lat": 19.0728, "lng": 72.8826},   # Kurla
    "400601": {"lat": 19.2183, "lng": 72.9781},   # Thane
    "411001": {"lat": 18.5204, "lng": 73.8567},   # Pune
    "422001": {"lat": 19.9975, "lng": 73.7898},   # Nashik
    "440001": {"lat": 21.1458, "lng": 79.0882},   # Nagpur
    "380001": {"lat": 23.0225, "lng": 72.5714},   # Ahmedabad
    "395003": {"lat": 21.1702, "lng": 72.8311},   # Surat
    "390001": {"lat": 22.3072, "lng": 73.1812},   # Vadodara
    "360001": {"lat": 22.3039, "lng": 70.8022},   # Rajkot
    "403001": {"lat": 15.4909, "lng": 73.8278},   # Panaji
    "452001": {"lat": 22.7196, "lng": 75.8577},   # Indore
    "462001": {"lat": 23.2599, "lng": 77.4126},   # Bhopal
    # South
    "560001": {"lat": 12.9716, "lng": 77.5946},   # Bengaluru GPO
    "560100": {"lat": 12.8452, "lng": 77.6602},   # Electronic City
    "600001": {"lat": 13.0827, "lng": 80.2707},   # Chennai GPO
    "500001": {"lat": 17.3850, "lng": 78.4867},   # Hyderabad
    "641001": {"lat": 11.0168, "lng": 76.9558},   # Coimbatore
    "625001": {"lat": 9.9252, "lng": 78.1198},    # Madurai
    "682001": {"lat": 9.9312, "lng": 76.2673},    # Kochi
    "695001": {"lat": 8.5241, "lng": 76.9366},    # Thiruvananthapuram
    "570001": {"lat": 12.2958, "lng": 76.6394},   # Mysuru
    "575001": {"lat": 12.9141, "lng": 74.8560},   # Mangaluru
    "530001": {"lat": 17.6868, "lng": 83.2185},   # Visakhapatnam
    "520001": {"lat": 16.5062, "lng": 80.6480},   # Vijayawada
    # East & North-East
    "700001": {"lat": 22.5726, "lng": 88.3639},   # Kolkata GPO
    "751001": {"lat": 20.2961, "lng": 85.8245},   # Bhubaneswar
    "800001": {"lat": 25.5941, "lng": 85.1376},   # Patna
    "834001": {"lat": 23.3441, "lng": 85.3096},   # Ranchi
    "781001": {"lat": 26.1445, "lng": 91.7362},   # Guwahati
    "492001": {"lat": 21.2514, "lng": 81.6296},   # Raipur
}


@lru_cache()
def load_pincode_coordinates(path: Optional[str] = None) -> Dict[str, Dict[str, float]]:
    """
    Built-in coordinates merged with the optional JSON extension at `path`.

    A missing or unreadable extension file is logged and the built-in table is used.
    """
    coordinates = dict(PINCODE_COORDINATES)
    if not path:
        return coordinates

    try:
        with open(path, encoding="utf-8") as f:
            extra = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load pincode coordinates from {path}: {e}")
        return coordinates

    loaded = 0
    for pincode, point in extra.items():
        try:
            coordinates[str(pincode)] = {"lat": float(point["lat"]), "lng": float(point["lng"])}
            loaded += 1
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed coordinates for pincode {pincode}")
    logger.info(f"Loaded {loaded} pincode coordinates from {path}")
    return coordinates
