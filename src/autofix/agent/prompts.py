"""Prompts sent to the recognition service."""

PLATE_PROMPT = (
    "Extract the license plate number from this image. "
    "Return ONLY the plate number, nothing else."
)

PART_PROMPT = """Identify the car part in this image that appears damaged.
Provide a standard name and a rough market estimate for the part in USD.

Respond with a single JSON object and nothing else:
{"name": "<part name>", "estimatedPrice": <number>}
"""

QUOTES_PROMPT = """Simulate 3 different price quotes for a "{part_name}" from local distributors.
Include distributor name, price, and labor estimate (all amounts in USD).

Respond with a JSON array and nothing else:
[{{"source": "<distributor>", "price": <number>, "laborEstimate": <number>}}]
"""

SUMMARY_PROMPT = (
    "Summarize the following mechanic's notes into a professional job "
    "description for an invoice. Return only the description.\n\n"
    "Notes: \"{transcript}\""
)
