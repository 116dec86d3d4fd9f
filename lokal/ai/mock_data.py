from __future__ import annotations

# Only served when ENABLE_MOCK_DATA is on and the model call failed
MOCK_FALLBACK_DEALS = [
    {
        "id": "mock-1",
        "business_id": "mock-biz-1",
        "businessName": "Lokal Pizza Demo",
        "title": "Buy 1 Slice Get 1 Free",
        "description": "Welcome to Lokal! This is a demo deal shown because the AI service is unavailable.",
        "discount": "BOGO",
        "category": "food",
        "distance": "0.1 miles",
        "imageUrl": "https://images.unsplash.com/photo-1513104890138-7c749659a591?auto=format&fit=crop&w=800&q=80",
        "code": "DEMO2024",
        "expiry": "2025-12-31",
        "website": "https://google.com",
    },
    {
        "id": "mock-2",
        "business_id": "mock-biz-2",
        "businessName": "City Coffee Roasters",
        "title": "Free Pastry with Latte",
        "description": "Start your morning right. Get a free croissant with any large drink.",
        "discount": "FREE GIFT",
        "category": "food",
        "distance": "0.3 miles",
        "imageUrl": "https://images.unsplash.com/photo-1509042239860-f550ce710b93?auto=format&fit=crop&w=800&q=80",
        "code": "COFFEE",
        "expiry": "2025-12-31",
        "website": "https://google.com",
    },
    {
        "id": "mock-3",
        "business_id": "mock-biz-3",
        "businessName": "Urban Outfitters Demo",
        "title": "20% Off Summer Collection",
        "description": "Flash sale on all summer items. In-store only.",
        "discount": "20% OFF",
        "category": "retail",
        "distance": "0.5 miles",
        "imageUrl": "https://images.unsplash.com/photo-1441986300917-64674bd600d8?auto=format&fit=crop&w=800&q=80",
        "code": "SUMMER20",
        "expiry": "2025-12-31",
        "website": "https://google.com",
    },
]
