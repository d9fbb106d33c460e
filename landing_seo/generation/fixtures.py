"""Canned provider answers for offline runs, keyed by request tag."""

DEFAULT_FIXTURES = {
    # ── Strategy phase ────────────────────────────────────────────────────
    "lsi_keywords": [
        "online booking", "google maps listing", "local seo", "patient reviews",
        "mobile friendly website", "appointment reminders", "clinic website",
        "page speed", "google business profile", "new patients",
    ],
    "competitor_insights": [
        "Most competitors hide their prices, which adds friction to the decision",
        "Visitors under 35 book almost exclusively online after working hours",
        "Map pack rankings matter more than classic SEO for urgent local searches",
        "Unanswered negative reviews visibly lower conversion",
        "Pages slower than 3 seconds lose half of their visitors",
    ],
    "hook_angle": {
        "statement": "9 out of 10 local practices lose at least 15 clients a month to a site that fails on mobile.",
        "emotion": "fear",
        "reasoning": "Owners invest in equipment but neglect the storefront their clients actually see first.",
    },
    "objections": [
        {"id": 1, "text": "Clients already find me through referrals", "category": "urgency",
         "rebuttalStrategy": "Most new clients search online before they call; referrals alone do not scale."},
        {"id": 2, "text": "I have no time to manage a website", "category": "time",
         "rebuttalStrategy": "The site takes bookings around the clock and saves phone time."},
        {"id": 3, "text": "Online marketing did not work for me before", "category": "trust",
         "rebuttalStrategy": "Generic agencies ignore how this niche buys; show the difference."},
        {"id": 4, "text": "It is too expensive", "category": "money",
         "rebuttalStrategy": "An idle chair costs more than the site; show payback in months."},
        {"id": 5, "text": "I am not technical", "category": "knowledge",
         "rebuttalStrategy": "You do not need to be; everything is handled for you."},
    ],
    "content_outline": [
        {"title": "Why most practices lose clients without noticing",
         "purpose": "Hook and agitate the problem with concrete numbers.",
         "keyPoints": ["How clients search today", "What a missed booking costs"],
         "lsiKeywords": ["online booking", "new patients"], "tone": "urgent"},
        {"title": "How client behaviour changed in the last three years",
         "purpose": "Explain why the problem exists and build authority.",
         "keyPoints": ["Search before calling", "Reviews as social proof"],
         "lsiKeywords": ["patient reviews", "local seo"], "tone": "educational"},
        {"title": "The real cost of an outdated site",
         "purpose": "Quantify the cost of doing nothing.",
         "keyPoints": ["Lost clients times average value", "Modern site versus lost revenue"],
         "lsiKeywords": ["page speed", "mobile friendly website"], "tone": "authoritative"},
    ],
    "call_to_action": "Get a free audit of your online presence and see exactly where you lose clients.",
    # ── Content phase ─────────────────────────────────────────────────────
    "meta_tags": {
        "metaTitle": "Website for Your Practice, SEO Included | Webnova",
        "metaDescription": "Websites for local practices with SEO included: online booking, Google Maps and sub-second load times.",
    },
    "hero": {
        "h1": "A Professional Website for Your Practice",
        "subheadline": "Win new clients from Google Maps and local search within 30 days. No technical skills needed.",
    },
    "aio_definition": (
        "A modern practice attracts clients through a professional online presence. "
        "A site optimised for Google Maps and local search brings 15-20 new bookings a month on average."
    ),
    "pain_agitation": (
        "Every day without a working site sends clients to a competitor. "
        "Most of them search online before they call, and an outdated site looks like a closed door."
    ),
    "comparison_table": {
        "headers": ["Without a modern site", "With an optimised site"],
        "rows": [
            ["Invisible on Google Maps", "First page in local search"],
            ["Referrals only", "Steady flow of new clients"],
            ["Phone-only bookings", "Online bookings 24/7"],
        ],
    },
    "technical_solution": (
        "The site ships with online booking, Google Business Profile sync, "
        "sub-2-second load times, responsive design, on-page SEO and SSL."
    ),
    "faq": [
        {"question": "How long does the build take?", "answer": "The full site is ready in 7-14 working days."},
        {"question": "Do I need to know how to code?", "answer": "No. We handle design, content and optimisation."},
        {"question": "How does it bring in clients?", "answer": "Local SEO and Google Maps put you in front of nearby searches."},
    ],
    "cta_section": {
        "headline": "Get Your Personal Offer Within 24 Hours",
        "body": "Fill in the form and receive a complete offer tailored to your practice. No obligation.",
        "buttonText": "Get My Free Offer",
    },
    "schema": {
        "product": {
            "@context": "https://schema.org",
            "@type": "Service",
            "name": "Website for local practices",
            "description": "Professional websites with SEO included",
            "provider": {"@type": "Organization", "name": "Webnova"},
            "areaServed": "Romania",
        },
        "faq": {"@context": "https://schema.org", "@type": "FAQPage", "mainEntity": []},
        "breadcrumb": {"@context": "https://schema.org", "@type": "BreadcrumbList", "itemListElement": []},
    },
    "internal_links": {
        "internalLinks": [
            {"text": "Website for veterinary clinics", "slug": "cabinet-veterinar"},
            {"text": "Website for beauty salons", "slug": "salon-infrumusetare"},
        ],
    },
    "connection_test": "OK",
}
