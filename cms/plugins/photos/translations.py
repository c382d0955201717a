en = {
    "photos": {
        "navName": "Photos",
        "title": "Photo Albums",
        "gallery": "Gallery",
        "noAlbums": "No albums yet",
        "photoCount": "{count} photos",
        "backToGallery": "Back to gallery",
        "recentAlbums": "Recent albums",
    },
}

nl = {
    "photos": {
        "navName": "Foto's",
        "title": "Fotoalbums",
        "gallery": "Galerij",
        "noAlbums": "Nog geen albums",
        "photoCount": "{count} foto's",
        "backToGallery": "Terug naar galerij",
        "recentAlbums": "Recente albums",
    },
}
