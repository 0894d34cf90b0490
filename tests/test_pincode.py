# tests/test_pincode.py
import math

import httpx
import pytest

from storefront.services.pincode import (
    PincodeDirectory,
    StaticPincodeDirectory,
    approximate_coordinates,
)

GANDHINAGAR = [
    {
        "Message": "Number of pincode(s) found:1",
        "Status": "Success",
        "PostOffice": [
            {
                "Name": "Gandhinagar Sector 2",
                "District": "Gandhinagar",
                "State": "Gujarat",
                "Pincode": "380052",
            }
        ],
    }
]

NOT_FOUND = [{"Message": "No records found", "Status": "Error", "PostOffice": None}]


def make_directory(handler, calls=None):
    def recording_handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request.url.path)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return PincodeDirectory(base_url="https://pincodes.test", http_client=client)


@pytest.mark.asyncio
async def test_lookup_parses_first_post_office():
    directory = make_directory(lambda request: httpx.Response(200, json=GANDHINAGAR))

    info = await directory.get_pincode_info("380052")

    assert (info.area, info.district, info.state) == ("Gandhinagar Sector 2", "Gandhinagar", "Gujarat")
    assert await directory.is_pincode_valid("380052")
    await directory.close()


@pytest.mark.asyncio
async def test_lookups_are_cached():
    calls = []
    directory = make_directory(lambda request: httpx.Response(200, json=GANDHINAGAR), calls)

    await directory.get_pincode_info("380052")
    await directory.get_pincode_info("380052")
    assert calls == ["/pincode/380052"]

    directory.clear_cache()
    await directory.get_pincode_info("380052")
    assert len(calls) == 2
    await directory.close()


@pytest.mark.asyncio
async def test_unknown_pincode_is_invalid():
    directory = make_directory(lambda request: httpx.Response(200, json=NOT_FOUND))

    assert await directory.get_pincode_info("999999") is None
    assert not await directory.is_pincode_valid("999999")
    await directory.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, json={"error": "down"}),
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json={"unexpected": "shape"}),
    ],
)
async def test_bad_responses_count_as_not_found(response):
    directory = make_directory(lambda request: response)

    assert await directory.get_pincode_info("380052") is None
    await directory.close()


@pytest.mark.asyncio
async def test_network_errors_count_as_not_found():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    directory = make_directory(handler)

    assert not await directory.is_pincode_valid("380052")
    await directory.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("pincode", ["", "38005", "3800521", "38005A"])
async def test_malformed_pincodes_skip_the_network(pincode):
    calls = []
    directory = make_directory(lambda request: httpx.Response(200, json=GANDHINAGAR), calls)

    assert not await directory.is_pincode_valid(pincode)
    assert calls == []
    await directory.close()


@pytest.mark.asyncio
async def test_static_directory():
    directory = StaticPincodeDirectory()

    assert await directory.is_pincode_valid("395007")
    assert not await directory.is_pincode_valid("110001")
    assert (await directory.get_pincode_info("360001")).district == "Rajkot"


# --- Distance and coverage ---

def gujarat_post_office(pincode):
    return [
        {
            "Status": "Success",
            "PostOffice": [
                {"Name": f"Office {pincode}", "District": "Gandhinagar", "State": "Gujarat", "Pincode": pincode}
            ],
        }
    ]


def gandhinagar_area(request: httpx.Request) -> httpx.Response:
    pincode = request.url.path.rsplit("/", 1)[-1]
    if pincode in {"380050", "380051", "380052", "380053"}:
        return httpx.Response(200, json=gujarat_post_office(pincode))
    return httpx.Response(200, json=NOT_FOUND)


@pytest.mark.asyncio
async def test_distance_between_known_pincodes():
    directory = StaticPincodeDirectory()

    distance = await directory.calculate_pincode_distance("395001", "360001")

    assert 230 < distance < 260
    assert await directory.calculate_pincode_distance("395007", "395007") == 0


@pytest.mark.asyncio
async def test_distance_falls_back_to_numeric_difference():
    directory = StaticPincodeDirectory()

    assert await directory.calculate_pincode_distance("110001", "110021") == 0.02
    assert await directory.calculate_pincode_distance("11000", "110021") == math.inf


@pytest.mark.asyncio
async def test_serviceable_within_radius():
    directory = StaticPincodeDirectory()

    assert await directory.is_pincode_serviceable("395007", "395001")
    assert not await directory.is_pincode_serviceable("395007", "395001", max_radius_km=5)
    assert not await directory.is_pincode_serviceable("395007", "380052")


@pytest.mark.asyncio
async def test_static_coverage_depends_on_radius():
    directory = StaticPincodeDirectory()

    assert await directory.generate_covered_pincodes("395007") == ["395001", "395006", "395007"]
    assert await directory.generate_covered_pincodes("395007", radius_km=5) == ["395007"]


@pytest.mark.asyncio
async def test_coverage_for_unknown_base_is_the_base_alone():
    directory = StaticPincodeDirectory()

    assert await directory.generate_covered_pincodes("110021") == ["110021"]
    assert await directory.generate_covered_pincodes("1100") == []


@pytest.mark.asyncio
async def test_lookup_fills_coordinates():
    directory = make_directory(gandhinagar_area)

    known = await directory.get_pincode_info("380052")
    approximate = await directory.get_pincode_info("380053")

    assert (known.lat, known.lng) == approximate_coordinates("380052", "Gujarat")
    assert (known.lat, known.lng) == (23.23, 72.64)
    # Not in the coordinate table: the state centre stands in
    assert (approximate.lat, approximate.lng) == approximate_coordinates("380053", "Gujarat")
    await directory.close()


@pytest.mark.asyncio
async def test_coverage_from_lookup_api_is_cached():
    calls = []
    directory = make_directory(gandhinagar_area, calls)

    covered = await directory.generate_covered_pincodes("380052", radius_km=20)

    assert covered == ["380050", "380051", "380052"]
    assert "/pincode/380053" in calls

    made = len(calls)
    assert await directory.generate_covered_pincodes("380052", radius_km=20) == covered
    assert len(calls) == made
    await directory.close()
