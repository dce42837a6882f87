"""
Lyft Python client - Quickstart

Gets a public access token, then lists ride types and cost estimates for a
trip across San Francisco.

Usage:
    pip install lyft-python
    export LYFT_CLIENT_ID=your_client_id
    export LYFT_CLIENT_SECRET=your_client_secret
    python main.py

Or put your credentials in a .env file:
    echo 'LYFT_CLIENT_ID=your_client_id' > .env
    echo 'LYFT_CLIENT_SECRET=your_client_secret' >> .env
    python main.py

Set LYFT_SANDBOX=1 to use your sandbox secret.
"""

import os

def load_dotenv(path):
    """Load .env file into environment variables."""
    try:
        with open(path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#'):
                    continue
                if '=' not in line:
                    continue
                key, val = line.split('=', 1)
                val = val.strip()
                if len(val) >= 2 and val[0] in ('"', "'") and val[-1] == val[0]:
                    val = val[1:-1]
                os.environ.setdefault(key.strip(), val)
    except FileNotFoundError:
        pass

from lyft import Client, StatusError, auth, is_rate_limit, utils

START = (37.7763, -122.3918)  # Caltrain
END = (37.8080, -122.4177)  # Fisherman's Wharf


def main():
    load_dotenv('../.env')
    load_dotenv('.env')

    secret = os.environ["LYFT_CLIENT_SECRET"]
    if os.environ.get("LYFT_SANDBOX"):
        secret = auth.sandbox_secret(secret)

    token, _ = auth.client_credentials_token(os.environ["LYFT_CLIENT_ID"], secret)
    print(f"Got token, expires in {token.expires}")

    with Client(token.access_token) as client:
        # Ride types
        ride_types, headers = client.ride_types(*START)
        for rt in ride_types:
            print(f"{rt.display_name}: {rt.seats} seats, base {rt.pricing.base} {rt.pricing.currency}")
        remaining, ok = utils.rate_remaining(headers)
        if ok:
            print(f"Rate limit remaining: {remaining}")

        # Cost estimates
        try:
            estimates, headers = client.cost_estimates(*START, *END)
        except StatusError as e:
            if is_rate_limit(e):
                print("Rate limited, try again later")
                return
            raise
        for est in estimates:
            low, high = est.minimum_cost / 100, est.maximum_cost / 100
            print(f"{utils.ride_type_display(est.ride_type)}: ${low:.2f}-${high:.2f}, {est.duration}")
        print(f"Request ID: {utils.request_id(headers)}")

    print("Done! Client is working.")


if __name__ == "__main__":
    main()
