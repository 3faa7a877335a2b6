"""
Catalog — Literal store content created by the build.

Shop settings, theme settings, collections, pages and the seed products for
the GlamorousDesi store. Everything here is plain data or a pure function of
its arguments; nothing in this module talks to the API.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

VENDOR = "GlamorousDesi"
CONTACT_EMAIL = "contact@glamorousdesi.com"

SHOP_SETTINGS = {
    "email": CONTACT_EMAIL,
    "customer_email": CONTACT_EMAIL,
    "city": "New York",
    "province": "NY",
    "country_name": "United States",
    "currency": "USD",
    "money_format": "${{amount}}",
    "money_with_currency_format": "${{amount}} USD",
    "timezone": "America/New_York",
}

THEME_SETTINGS_ASSET_KEY = "config/settings_data.json"

THEME_SETTINGS = {
    "current": {
        "colors_solid_button_labels": "#2C2C2C",
        "colors_accent_1": "#87A96B",
        "colors_accent_2": "#D4AF37",
        "colors_text": "#2C2C2C",
        "colors_outline_button_labels": "#87A96B",
        "colors_background_1": "#FFFFFF",
        "colors_background_2": "#F5F5F5",
        "typography_header_font_family": "playfair_display_n4",
        "typography_body_font_family": "inter_n4",
        "social_facebook_link": "https://facebook.com/glamorousdesi",
        "social_instagram_link": "https://instagram.com/glamorousdesi",
        "social_pinterest_link": "https://pinterest.com/glamorousdesi",
        "sections": {
            "announcement-bar": {
                "type": "announcement-bar",
                "settings": {
                    "text": (
                        "🎊 Connect with MyShaadiDreams for Complete Wedding Planning"
                        " | Free Shipping on Orders Over $200"
                    ),
                    "color_scheme": "accent-1",
                },
            }
        },
    }
}


def theme_settings_asset() -> Dict[str, str]:
    return {
        "key": THEME_SETTINGS_ASSET_KEY,
        "value": json.dumps(THEME_SETTINGS),
    }


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

CUSTOM_COLLECTIONS = [
    {
        "title": "Sarees",
        "handle": "sarees",
        "body_html": "<p>Explore our exquisite collection of traditional and designer sarees.</p>",
        "image": {"src": "https://burst.shopifycdn.com/photos/silk-fabric-collection.jpg"},
    },
    {
        "title": "Lehengas",
        "handle": "lehengas",
        "body_html": "<p>Beautiful lehengas for weddings and special occasions.</p>",
    },
    {
        "title": "Salwar Suits",
        "handle": "salwar-suits",
        "body_html": "<p>Elegant salwar suits in various styles.</p>",
    },
    {
        "title": "Men's Wear",
        "handle": "mens-wear",
        "body_html": "<p>Traditional and contemporary ethnic wear for men.</p>",
    },
    {
        "title": "Jewelry",
        "handle": "jewelry",
        "body_html": "<p>Complete your look with our stunning jewelry.</p>",
    },
]

NEW_ARRIVALS_WINDOW_DAYS = 7


def smart_collections(now: Optional[datetime] = None) -> List[Dict]:
    """Rule-based collections. Rules are evaluated by Shopify, not here.

    The "New Arrivals" cutoff is computed from ``now`` (UTC) at build time.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=NEW_ARRIVALS_WINDOW_DAYS)

    return [
        {
            "title": "New Arrivals",
            "handle": "new-arrivals",
            "body_html": "<p>Check out our latest additions!</p>",
            "rules": [{
                "column": "created_at",
                "relation": "greater_than",
                "condition": cutoff.isoformat(),
            }],
            "disjunctive": False,
        },
        {
            "title": "Premium Collection",
            "handle": "premium-collection",
            "body_html": "<p>Our exclusive premium range.</p>",
            "rules": [{
                "column": "variant_price",
                "relation": "greater_than",
                "condition": "200",
            }],
        },
        {
            "title": "Under $200",
            "handle": "under-200",
            "body_html": "<p>Beautiful ethnic wear at affordable prices.</p>",
            "rules": [{
                "column": "variant_price",
                "relation": "less_than",
                "condition": "200",
            }],
        },
    ]


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------

ABOUT_US_HTML = """
<h2>Welcome to GlamorousDesi</h2>
<p>Your premier destination for authentic Indian ethnic wear. We specialize in bringing you the finest collection of sarees, lehengas, and traditional attire that celebrates the rich heritage of Indian craftsmanship.</p>

<h3>Our Mission</h3>
<p>To make luxury Indian fashion accessible to the global diaspora while maintaining the authenticity and quality that defines true Indian elegance.</p>

<h3>Why Choose GlamorousDesi?</h3>
<ul>
  <li>✨ Handpicked Premium Collections</li>
  <li>✨ Direct from Trusted Manufacturers</li>
  <li>✨ Worldwide Express Shipping</li>
  <li>✨ Custom Tailoring Services</li>
  <li>✨ 100% Authentic Products</li>
  <li>✨ Easy Returns &amp; Exchanges</li>
</ul>
"""

BOOK_APPOINTMENT_HTML = """
<h2>Book Your Personal Styling Appointment</h2>
<p>Get personalized assistance from our fashion experts.</p>

<div id="appointment-widget">
  <h3>Available Services:</h3>
  <ul>
    <li>Personal Styling Consultation</li>
    <li>Wedding Outfit Planning</li>
    <li>Custom Design Consultation</li>
    <li>Virtual Styling Session</li>
  </ul>

  <p><strong>Contact us to book:</strong></p>
  <p>📱 WhatsApp: +1 (555) 123-4567</p>
  <p>📧 Email: appointments@glamorousdesi.com</p>
</div>
"""


def shipping_policy_html() -> str:
    return """
<h2>Shipping Policy</h2>

<h3>Processing Time</h3>
<p>All orders are processed within 1-2 business days.</p>

<h3>Domestic Shipping (USA)</h3>
<ul>
  <li>Standard Shipping (5-7 business days): $12.99</li>
  <li>Express Shipping (2-3 business days): $24.99</li>
  <li>Free shipping on orders over $200</li>
</ul>

<h3>International Shipping</h3>
<ul>
  <li>Canada: $29.99</li>
  <li>UK/Europe: $39.99</li>
  <li>Australia: $49.99</li>
  <li>Rest of World: $59.99</li>
</ul>
"""


def return_policy_html() -> str:
    return """
<h2>Return Policy</h2>

<h3>30-Day Return Window</h3>
<p>We accept returns within 30 days of delivery.</p>

<h3>Return Conditions</h3>
<ul>
  <li>Items must be unworn and in original condition</li>
  <li>All tags must be attached</li>
  <li>Custom-made items are final sale</li>
</ul>
"""


SIZE_CHART = [
    ("XS", '32-34"', '26-28"', '34-36"'),
    ("S", '34-36"', '28-30"', '36-38"'),
    ("M", '36-38"', '30-32"', '38-40"'),
    ("L", '38-40"', '32-34"', '40-42"'),
    ("XL", '40-42"', '34-36"', '42-44"'),
    ("XXL", '42-44"', '36-38"', '44-46"'),
]


def size_guide_html() -> str:
    rows = "\n".join(
        f"  <tr><td>{size}</td><td>{bust}</td><td>{waist}</td><td>{hips}</td></tr>"
        for size, bust, waist, hips in SIZE_CHART
    )
    return (
        "\n<h2>Size Guide</h2>\n\n"
        "<h3>Women's Size Chart</h3>\n"
        "<table>\n"
        "  <tr><th>Size</th><th>Bust</th><th>Waist</th><th>Hips</th></tr>\n"
        f"{rows}\n"
        "</table>\n"
    )


def pages() -> List[Dict]:
    return [
        {"title": "About Us", "handle": "about-us", "body_html": ABOUT_US_HTML},
        {"title": "Book Appointment", "handle": "book-appointment", "body_html": BOOK_APPOINTMENT_HTML},
        {"title": "Shipping Policy", "handle": "shipping-policy", "body_html": shipping_policy_html()},
        {"title": "Return Policy", "handle": "return-policy", "body_html": return_policy_html()},
        {"title": "Size Guide", "handle": "size-guide", "body_html": size_guide_html()},
    ]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

DEFAULT_SIZES = ["XS", "S", "M", "L", "XL", "XXL", "Custom"]
MENS_SIZES = ["S", "M", "L", "XL", "XXL", "Custom"]

CUSTOM_SIZE = "Custom"
STANDARD_STOCK = 10
CUSTOM_STOCK = 100
VARIANT_WEIGHT_GRAMS = 500


def generate_variants(base_sku: str, base_price: float, sizes: Optional[List[str]] = None) -> List[Dict]:
    """One variant per size, all at the same price.

    SKU is ``{base_sku}_{size}``; the made-to-measure "Custom" size carries a
    larger stock buffer than standard sizes.
    """
    sizes = DEFAULT_SIZES if sizes is None else sizes
    return [
        {
            "option1": size,
            "price": str(base_price),
            "sku": f"{base_sku}_{size}",
            "inventory_quantity": CUSTOM_STOCK if size == CUSTOM_SIZE else STANDARD_STOCK,
            "inventory_management": "shopify",
            "fulfillment_service": "manual",
            "requires_shipping": True,
            "taxable": True,
            "weight": VARIANT_WEIGHT_GRAMS,
            "weight_unit": "g",
            "position": index + 1,
        }
        for index, size in enumerate(sizes)
    ]


def generate_product_description(fabric: str, color: str, product_type: str, occasion: str) -> str:
    return f"""
<div class="product-description">
  <h3>Exquisite {color} {fabric} {product_type}</h3>

  <p>Embrace timeless elegance with this stunning {fabric} {product_type} from GlamorousDesi's exclusive collection.
  This masterpiece showcases the perfect blend of traditional craftsmanship and contemporary design,
  making it an ideal choice for {occasion}.</p>

  <h4>✨ Key Features:</h4>
  <ul>
    <li>Premium {fabric} fabric with luxurious texture and drape</li>
    <li>Intricate embroidery and embellishments by skilled artisans</li>
    <li>Comfortable fit with excellent breathability</li>
    <li>Color: {color} - vibrant and fade-resistant</li>
    <li>Perfect for {occasion.lower()} and special celebrations</li>
  </ul>

  <h4>👗 Styling Tips:</h4>
  <p>Pair this elegant {product_type} with traditional jewelry for a classic look, or mix with
  contemporary accessories for a fusion style.</p>

  <h4>📏 Size &amp; Fit:</h4>
  <ul>
    <li>Available in sizes XS to XXL plus custom sizing</li>
    <li>Regular fit with comfortable silhouette</li>
    <li>Refer to our size chart for perfect fit</li>
  </ul>

  <h4>🌟 Care Instructions:</h4>
  <ul>
    <li>Dry clean recommended for best results</li>
    <li>Store in a cool, dry place</li>
    <li>Iron on reverse side with low heat</li>
  </ul>
</div>
"""


# (title, handle, fabric, color, description type, occasion, product_type, tags, base_sku, price, sizes, image)
SEED_PRODUCTS = [
    (
        "Royal Blue Silk Saree - Wedding Collection", "royal-blue-silk-saree",
        "Silk", "Royal Blue", "Saree", "Wedding", "Saree",
        ["silk", "wedding", "blue", "premium", "designer"],
        "GD_RBSS_001", 149.99, DEFAULT_SIZES, "blue-silk-fabric.jpg",
    ),
    (
        "Elegant Pink Georgette Lehenga - Designer Edition", "elegant-pink-georgette-lehenga",
        "Georgette", "Pink", "Lehenga", "Party", "Lehenga",
        ["georgette", "designer", "pink", "party", "premium"],
        "GD_EPGL_001", 199.99, DEFAULT_SIZES, "pink-fabric-texture.jpg",
    ),
    (
        "Traditional Red Banarasi Saree - Bridal Collection", "traditional-red-banarasi-saree",
        "Banarasi Silk", "Red", "Saree", "Bridal", "Saree",
        ["silk", "banarasi", "bridal", "red", "premium", "wedding"],
        "GD_TRBS_001", 299.99, DEFAULT_SIZES, "red-fabric-texture.jpg",
    ),
    (
        "Contemporary Green Anarkali Suit - Festive Special", "contemporary-green-anarkali-suit",
        "Cotton Silk", "Green", "Anarkali Suit", "Festival", "Salwar Suit",
        ["anarkali", "festive", "green", "cotton-silk", "designer"],
        "GD_CGAS_001", 129.99, DEFAULT_SIZES, "green-fabric.jpg",
    ),
    (
        "Gold Embroidered Sherwani - Groom Collection", "gold-embroidered-sherwani",
        "Velvet", "Gold", "Sherwani", "Wedding", "Sherwani",
        ["sherwani", "wedding", "gold", "velvet", "groom", "premium"],
        "GD_LGES_001", 349.99, MENS_SIZES, "gold-fabric.jpg",
    ),
]


def seed_products() -> List[Dict]:
    products = []
    for (title, handle, fabric, color, kind, occasion, product_type,
         tags, base_sku, price, sizes, image) in SEED_PRODUCTS:
        products.append({
            "title": title,
            "handle": handle,
            "body_html": generate_product_description(fabric, color, kind, occasion),
            "vendor": VENDOR,
            "product_type": product_type,
            "tags": ",".join(tags),
            "options": [{"name": "Size", "values": list(sizes)}],
            "variants": generate_variants(base_sku, price, sizes),
            "images": [{"src": f"https://burst.shopifycdn.com/photos/{image}"}],
        })
    return products
