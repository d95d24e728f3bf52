from __future__ import annotations

SECTORS = {
    "Technology": {"icon": "computer", "summary": "Software, hardware and semiconductor makers."},
    "Healthcare": {"icon": "medical", "summary": "Pharma, biotech, devices and care providers."},
    "Financial Services": {"icon": "bank", "summary": "Banks, insurers, asset managers and exchanges."},
    "Consumer Cyclical": {"icon": "cart", "summary": "Retail, autos, travel and discretionary goods."},
    "Communication Services": {"icon": "antenna", "summary": "Telecom, media and interactive platforms."},
    "Industrials": {"icon": "factory", "summary": "Aerospace, machinery, transport and construction."},
    "Consumer Defensive": {"icon": "basket", "summary": "Food, beverages and household staples."},
    "Energy": {"icon": "flame", "summary": "Oil, gas and energy equipment."},
    "Utilities": {"icon": "bolt", "summary": "Electric, gas and water utilities."},
    "Real Estate": {"icon": "building", "summary": "REITs, developers and property services."},
    "Basic Materials": {"icon": "mineral", "summary": "Chemicals, metals, mining and forestry."},
}


def find_sector(name: str) -> str | None:
    wanted = name.strip().lower().replace("-", " ")
    for sector in SECTORS:
        if sector.lower() == wanted:
            return sector
    return None
