en = {
    "concerts": {
        "navName": "Concerts",
        "title": "Concerts",
        "upcoming": "Upcoming concerts",
        "past": "Past concerts",
        "noConcerts": "No concerts scheduled",
        "tickets": "Tickets",
        "settings": {
            "showPast": "Show past concerts",
        },
    },
}

nl = {
    "concerts": {
        "navName": "Concerten",
        "title": "Concerten",
        "upcoming": "Komende concerten",
        "past": "Afgelopen concerten",
        "noConcerts": "Geen concerten gepland",
        "tickets": "Tickets",
        "settings": {
            "showPast": "Toon afgelopen concerten",
        },
    },
}
