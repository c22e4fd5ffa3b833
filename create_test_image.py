from PIL import Image, ImageDraw

SIZE = 256
SCALE = 4


def draw_shapes(draw, s):
    # Red rectangle
    draw.rectangle([25 * s, 25 * s, 100 * s, 100 * s], fill=(255, 0, 0))
    # Green circle
    draw.ellipse([100 * s, 100 * s, 200 * s, 200 * s], fill=(0, 255, 0))
    # Blue triangle
    draw.polygon([(200 * s, 25 * s), (150 * s, 100 * s), (250 * s, 100 * s)], fill=(0, 0, 255))


# Aliased reference
noaa = Image.new("RGBA", (SIZE, SIZE), (0, 0, 0, 255))
draw_shapes(ImageDraw.Draw(noaa), 1)
noaa.save("test_image_noaa.png")

# Supersample then downscale to get anti-aliased edges
big = Image.new("RGBA", (SIZE * SCALE, SIZE * SCALE), (0, 0, 0, 255))
draw_shapes(ImageDraw.Draw(big), SCALE)
big.resize((SIZE, SIZE), Image.Resampling.BOX).save("test_image.png")

print("Created test_image.png and test_image_noaa.png")
