"""
Static region + service seed data.

This is a deliberately bounded SEO seed set (each state lists a handful of "major
cities"), not a general gazetteer. Vendors in other cities still appear on their state
pages; they just do not get a dedicated city landing page.
"""

from __future__ import annotations

from pasturepickup.domain.models import Service, State


def _state(name: str, code: str, *cities: str) -> State:
    return State(name=name, code=code, major_cities=tuple(cities))


US_STATES: tuple[State, ...] = (
    _state("Alabama", "AL", "Birmingham", "Montgomery", "Mobile", "Huntsville"),
    _state("Alaska", "AK", "Anchorage", "Fairbanks", "Juneau"),
    _state("Arizona", "AZ", "Phoenix", "Tucson", "Mesa", "Chandler", "Scottsdale"),
    _state("Arkansas", "AR", "Little Rock", "Fort Smith", "Fayetteville"),
    _state("California", "CA", "Los Angeles", "San Francisco", "San Diego", "Sacramento", "Fresno"),
    _state("Colorado", "CO", "Denver", "Colorado Springs", "Aurora", "Fort Collins"),
    _state("Connecticut", "CT", "Hartford", "New Haven", "Stamford", "Waterbury"),
    _state("Delaware", "DE", "Wilmington", "Dover", "Newark"),
    _state("Florida", "FL", "Miami", "Tampa", "Orlando", "Jacksonville", "Fort Lauderdale"),
    _state("Georgia", "GA", "Atlanta", "Augusta", "Columbus", "Savannah"),
    _state("Hawaii", "HI", "Honolulu", "Hilo", "Kailua-Kona"),
    _state("Idaho", "ID", "Boise", "Meridian", "Nampa", "Idaho Falls"),
    _state("Illinois", "IL", "Chicago", "Aurora", "Rockford", "Joliet", "Naperville"),
    _state("Indiana", "IN", "Indianapolis", "Fort Wayne", "Evansville", "South Bend"),
    _state("Iowa", "IA", "Des Moines", "Cedar Rapids", "Davenport", "Sioux City"),
    _state("Kansas", "KS", "Wichita", "Overland Park", "Kansas City", "Topeka"),
    _state("Kentucky", "KY", "Louisville", "Lexington", "Bowling Green", "Owensboro"),
    _state("Louisiana", "LA", "New Orleans", "Baton Rouge", "Shreveport", "Lafayette"),
    _state("Maine", "ME", "Portland", "Lewiston", "Bangor"),
    _state("Maryland", "MD", "Baltimore", "Frederick", "Rockville", "Gaithersburg"),
    _state("Massachusetts", "MA", "Boston", "Worcester", "Springfield", "Cambridge"),
    _state("Michigan", "MI", "Detroit", "Grand Rapids", "Warren", "Sterling Heights"),
    _state("Minnesota", "MN", "Minneapolis", "Saint Paul", "Rochester", "Duluth"),
    _state("Mississippi", "MS", "Jackson", "Gulfport", "Southaven", "Hattiesburg"),
    _state("Missouri", "MO", "Kansas City", "Saint Louis", "Springfield", "Columbia"),
    _state("Montana", "MT", "Billings", "Missoula", "Great Falls", "Bozeman"),
    _state("Nebraska", "NE", "Omaha", "Lincoln", "Bellevue", "Grand Island"),
    _state("Nevada", "NV", "Las Vegas", "Henderson", "Reno", "North Las Vegas"),
    _state("New Hampshire", "NH", "Manchester", "Nashua", "Concord"),
    _state("New Jersey", "NJ", "Newark", "Jersey City", "Paterson", "Elizabeth"),
    _state("New Mexico", "NM", "Albuquerque", "Las Cruces", "Rio Rancho", "Santa Fe"),
    _state("New York", "NY", "New York City", "Buffalo", "Rochester", "Syracuse", "Albany"),
    _state("North Carolina", "NC", "Charlotte", "Raleigh", "Greensboro", "Durham", "Winston-Salem"),
    _state("North Dakota", "ND", "Fargo", "Bismarck", "Grand Forks", "Minot"),
    _state("Ohio", "OH", "Columbus", "Cleveland", "Cincinnati", "Toledo", "Akron"),
    _state("Oklahoma", "OK", "Oklahoma City", "Tulsa", "Norman", "Broken Arrow"),
    _state("Oregon", "OR", "Portland", "Salem", "Eugene", "Gresham"),
    _state("Pennsylvania", "PA", "Philadelphia", "Pittsburgh", "Allentown", "Erie"),
    _state("Rhode Island", "RI", "Providence", "Warwick", "Cranston"),
    _state("South Carolina", "SC", "Charleston", "Columbia", "North Charleston", "Mount Pleasant"),
    _state("South Dakota", "SD", "Sioux Falls", "Rapid City", "Aberdeen", "Brookings"),
    _state("Tennessee", "TN", "Nashville", "Memphis", "Knoxville", "Chattanooga"),
    _state("Texas", "TX", "Houston", "San Antonio", "Dallas", "Austin", "Fort Worth"),
    _state("Utah", "UT", "Salt Lake City", "West Valley City", "Provo", "West Jordan"),
    _state("Vermont", "VT", "Burlington", "Essex", "South Burlington"),
    _state("Virginia", "VA", "Virginia Beach", "Norfolk", "Chesapeake", "Richmond"),
    _state("Washington", "WA", "Seattle", "Spokane", "Tacoma", "Vancouver"),
    _state("West Virginia", "WV", "Charleston", "Huntington", "Morgantown"),
    _state("Wisconsin", "WI", "Milwaukee", "Madison", "Green Bay", "Kenosha"),
    _state("Wyoming", "WY", "Cheyenne", "Casper", "Laramie"),
)

LIVESTOCK_SERVICES: tuple[Service, ...] = (
    Service(slug="dead-horse-removal", display_name="Dead Horse Removal"),
    Service(slug="dead-cattle-removal", display_name="Dead Cattle Removal"),
    Service(slug="dead-sheep-removal", display_name="Dead Sheep/Goat Removal"),
    Service(slug="livestock-removal-services", display_name="Livestock Removal Services"),
    Service(slug="emergency-livestock-removal", display_name="Emergency Livestock Removal"),
    Service(slug="farm-cleanup-services", display_name="Farm Cleanup Services"),
)

# Labels offered on the submission form (vendor `service_types` use these strings).
SERVICE_TYPE_LABELS: tuple[str, ...] = (
    "Dead Horse Removal",
    "Dead Cattle Removal",
    "Dead Sheep/Goat Removal",
    "Emergency Livestock Removal",
    "Farm Cleanup Services",
)

LIVESTOCK_SPECIES: tuple[str, ...] = ("Horse", "Cattle", "Sheep", "Goats", "Pigs", "Other")
