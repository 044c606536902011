from requestmaps import RequestMapLab
from requestmaps.exceptions import RequestMapsError
from requestmaps.types import BasemapOptions, Layer
from requestmaps.viz import render_layers, render_request_maps, save_figure
import matplotlib.pyplot as plt


def main():
    print("=== requestmaps: Bulky Items pickups in Los Angeles ===")

    # Data files (LA city boundary, LA Times neighborhoods, 311 sanitation requests)
    boundary_path = "data/la_city_boundary.geojson"
    neighborhoods_path = "data/la_neighborhoods.geojson"
    requests_path = "data/sanitation_requests.gpkg"

    print("1. Loading layers (projected to EPSG:3857 to match the basemap tiles)...")
    lab = RequestMapLab(crs="EPSG:3857")
    try:
        lab.load_boundary(boundary_path)
        lab.load_neighborhoods(neighborhoods_path)
        lab.load_requests(requests_path, clip=True)
    except RequestMapsError as e:
        print(f"   Failed to load data: {e}")
        return
    print(f"   {len(lab.neighborhoods)} neighborhoods, {len(lab.requests)} requests inside the city.")

    print("2. Rendering the figure set for 'Bulky Items'...")
    out = render_request_maps(
        lab,
        category="Bulky Items",
        place_label="Los Angeles",
        sample=5000,
        random_state=42,
        basemap=BasemapOptions(provider="CartoDB.Positron", zoom=10),
    )
    print(f"   {len(out['subset'])} Bulky Items requests, {len(out['coords'])} sampled for density.")
    busiest = out["neighborhood_counts"].sort_values("request_count", ascending=False).head(5)
    for _, row in busiest.iterrows():
        print(f"   - {row[lab.name_col]}: {row['request_count']}")

    print("3. Custom layered map: density bands over a dark basemap...")
    fig, ax = render_layers(
        [
            Layer(out["contours"], kind="filled_contours", style={"alpha": 0.6}),
            Layer(lab.neighborhoods, kind="outline", style={"color": "white", "linewidth": 0.3}),
            Layer(lab.boundary, kind="outline", style={"color": "white"}),
        ],
        basemap=BasemapOptions(provider="CartoDB.DarkMatter"),
        title="Bulky Items request density",
        scale_bar=True,
        north_arrow=True,
    )
    out["figures"]["custom"] = fig

    for name, figure in out["figures"].items():
        save_figure(figure, f"output/bulky_items_{name}.png")

    print("=== Done. Close plot windows to exit ===")
    plt.show()


if __name__ == "__main__":
    main()
