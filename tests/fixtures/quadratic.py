"""Stub learner: loss is (rate - center)^2, reported after some chatter."""
import sys

rate = float(sys.argv[1])
center = float(sys.argv[2]) if len(sys.argv) > 2 else 0.3

print(f"training with rate {rate}")
print("average loss = 99.0", file=sys.stderr)
sys.stderr.flush()
print("average loss = {:.9f}".format((rate - center) ** 2))
