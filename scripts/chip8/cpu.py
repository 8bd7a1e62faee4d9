# CHIP-8 INFO
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
# https://chip-8.github.io/links/
#
# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html


import random
from functools import wraps

from .constants import (DEBUG, FLAG_REGISTER, FONT_GLYPH_SIZE, FONT_START_ADDRESS, INSTRUCTION_SIZE,
                        REGISTER_COUNT, ROM_START_ADDRESS)
from .decoder import Op, decode
from .display import PixelBuffer
from .errors import MemoryBoundsError
from .keypad import Keypad
from .memory import Memory, Stack


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to print out the ASM of the instruction being called"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            mem_addr = args[0].pc - INSTRUCTION_SIZE    # args[0] equals self, pc already points to the next instruction
            vals = fn(*args, **kwargs)                  # use the locals() values of each decorated function in the print
            vals['mem_addr'] = mem_addr
            if DEBUG: print(msg.format(**vals))
        return wrapper_fn
    return decorator


# ******************** CPU SECTION
class Chip8:
    def __init__(self, keypad=None, rng=None):
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = [0] * REGISTER_COUNT
        self.pc = ROM_START_ADDRESS
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.draw = False
        self.waiting = False    # set while Fx0A is waiting for a key press
        self.screen = PixelBuffer()
        self.keypad = keypad if keypad is not None else Keypad()
        self.rng = rng if rng is not None else random.Random()
        self.instructions = {
            Op.SYS: self._sys,
            Op.CLS: self._clear_screen,
            Op.RET: self._return,
            Op.JP: self._jump,
            Op.CALL: self._call_addr,
            Op.SE_VX_BYTE: self._skip_if_eq,
            Op.SNE_VX_BYTE: self._skip_if_not_eq,
            Op.SE_VX_VY: self._skip_if_eq_regs,
            Op.LD_VX_BYTE: self._set_vk,
            Op.ADD_VX_BYTE: self._add_to_vk,
            Op.LD_VX_VY: self._set_vx_to_vy,
            Op.OR: self._set_vx_or_vy,
            Op.AND: self._set_vx_and_vy,
            Op.XOR: self._set_vx_xor_vy,
            Op.ADD_VX_VY: self._add_vx_vy,
            Op.SUB: self._sub_vx_vy,
            Op.SHR: self._shr,
            Op.SUBN: self._subn_vx_vy,
            Op.SHL: self._shl,
            Op.SNE_VX_VY: self._skip_if_not_eq_regs,
            Op.LD_I: self._set_idx,
            Op.JP_V0: self._jump_plus,
            Op.RND: self._random_byte_and,
            Op.DRW: self._to_screen,
            Op.SKP: self._skip_if_pressed,
            Op.SKNP: self._skip_if_not_pressed,
            Op.LD_VX_DT: self._set_vx_dt,
            Op.LD_VX_K: self._wait_keypress,
            Op.LD_DT_VX: self._set_dt_vx,
            Op.LD_ST_VX: self._set_st,
            Op.ADD_I_VX: self._add_to_idx,
            Op.LD_F_VX: self._select_char,
            Op.LD_B_VX: self._bcd_repr,
            Op.LD_I_VX: self._store_vregs,
            Op.LD_VX_I: self._load_vregs,
        }

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{self.v_regs}"
        timers = f"DELAY_TIMER:{self.dt} | SOUND_TIMER:{self.st}"
        stack = f"STACK:{self.stack}"
        devices = f"KEYPAD:{self.keypad}"
        flags = f"DRAW: {self.draw} | WAITING: {self.waiting}"
        return f"{registers}\n{timers}\n{stack}\n{devices}\n{flags}"

    @property
    def sound_on(self):
        """the host should beep while the sound timer is running"""
        return self.st > 0

    def load_rom(self, rom):
        self.mem.load_rom(rom)

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SYS 0x{address:04x}")
    def _sys(self, ins):
        """jump to a machine code routine, ignored by modern interpreters"""
        address = ins.nnn
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x}")
    def _skip_if_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        x = ins.x
        key = self.v_regs[x]
        if self.keypad[key]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x}")
    def _skip_if_not_pressed(self, ins):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        x = ins.x
        key = self.v_regs[x]
        if not self.keypad[key]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, K")
    def _wait_keypress(self, ins):
        """wait for a key press and store its value in Vx, the timers are frozen while waiting"""
        x = ins.x
        if self.keypad.untouched():
            self.pc -= INSTRUCTION_SIZE     # stay on the same instruction until a key is pressed
            self.waiting = True
        else:
            self.v_regs[x] = self.keypad.first()
            self.waiting = False
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, DT")
    def _set_vx_dt(self, ins):
        """set Vx = DT (delay timer) value"""
        x = ins.x
        self.v_regs[x] = self.dt
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x}")
    def _set_dt_vx(self, ins):
        """set DT (delay timer) = Vx"""
        x = ins.x
        self.dt = self.v_regs[x]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, ins):
        self.screen.clear()
        self.draw = True
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, ins):
        """return from a subroutine"""
        self.pc = self.stack.pop()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{address:04x}")
    def _jump(self, ins):
        address = ins.nnn
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{address:04x}")
    def _call_addr(self, ins):
        address = ins.nnn
        self.stack.append(self.pc)  # pc already points to the instruction after the call
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x}, {comparison_value}")
    def _skip_if_eq(self, ins):
        x, comparison_value = ins.x, ins.kk
        if self.v_regs[x] == comparison_value:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x}, {comparison_value}")
    def _skip_if_not_eq(self, ins):
        x, comparison_value = ins.x, ins.kk
        if self.v_regs[x] != comparison_value:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x}, V{y}")
    def _skip_if_eq_regs(self, ins):
        x, y = ins.x, ins.y
        if self.v_regs[x] == self.v_regs[y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x}, V{y}")
    def _skip_if_not_eq_regs(self, ins):
        x, y = ins.x, ins.y
        if self.v_regs[x] != self.v_regs[y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, {value}")
    def _set_vk(self, ins):
        """set the value of one of the 16 variable registers, Vx"""
        x, value = ins.x, ins.kk
        self.v_regs[x] = value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x}, {value}")
    def _add_to_vk(self, ins):
        """add to the value already present in one of the variable registers, VF is not affected"""
        x, value = ins.x, ins.kk
        self.v_regs[x] = (self.v_regs[x] + value) & 0xFF    # keep only the lowest 8 bits from the result and store them in Vx
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, V{y}")
    def _set_vx_to_vy(self, ins):
        """set the value of Vx equal to that of Vy"""
        x, y = ins.x, ins.y
        self.v_regs[x] = self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x}, V{y}")
    def _set_vx_or_vy(self, ins):
        """set the value of Vx to Vx OR Vy, VF is not affected"""
        x, y = ins.x, ins.y
        self.v_regs[x] |= self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x}, V{y}")
    def _set_vx_and_vy(self, ins):
        """set the value of Vx to Vx AND Vy, VF is not affected"""
        x, y = ins.x, ins.y
        self.v_regs[x] &= self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x}, V{y}")
    def _set_vx_xor_vy(self, ins):
        """set the value of Vx to Vx XOR Vy, VF is not affected"""
        x, y = ins.x, ins.y
        self.v_regs[x] ^= self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x}, V{y}")
    def _add_vx_vy(self, ins):
        """set the value of Vx to Vx + Vy, VF = carry"""
        x, y = ins.x, ins.y
        total = self.v_regs[x] + self.v_regs[y]
        self.v_regs[x] = total & 0xFF   # keep only the lowest 8 bits from the result and store them in Vx
        self.v_regs[FLAG_REGISTER] = 1 if total > 255 else 0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x}, V{y}")
    def _sub_vx_vy(self, ins):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        x, y = ins.x, ins.y
        not_borrow = 1 if self.v_regs[x] > self.v_regs[y] else 0
        self.v_regs[x] = (self.v_regs[x] - self.v_regs[y]) & 0xFF
        self.v_regs[FLAG_REGISTER] = not_borrow
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x} 1")
    def _shr(self, ins):
        """set Vx equal to Vx SHR 1 in place (Vy is ignored), VF = bit shifted out"""
        x = ins.x
        LSB = self.v_regs[x] & 0x1
        self.v_regs[x] = self.v_regs[x] >> 1
        self.v_regs[FLAG_REGISTER] = LSB
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x}, V{y}")
    def _subn_vx_vy(self, ins):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        x, y = ins.x, ins.y
        not_borrow = 1 if self.v_regs[y] > self.v_regs[x] else 0
        self.v_regs[x] = (self.v_regs[y] - self.v_regs[x]) & 0xFF
        self.v_regs[FLAG_REGISTER] = not_borrow
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x} 1")
    def _shl(self, ins):
        """set Vx equal to Vx SHL 1 in place (Vy is ignored), VF = bit shifted out"""
        x = ins.x
        MSB = (self.v_regs[x] & 0x80) >> 7
        self.v_regs[x] = (self.v_regs[x] << 1) & 0xFF   # multiply by 2 and keep only the lowest 8 bits from the result
        self.v_regs[FLAG_REGISTER] = MSB
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{value:04x}")
    def _set_idx(self, ins):
        """set the value of the I register"""
        value = ins.nnn
        self.idx = value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{address:04x}")
    def _jump_plus(self, ins):
        address = ins.nnn
        v0 = self.v_regs[0x0]
        self.pc = address + v0
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x}, 0x{kk:02x}")
    def _random_byte_and(self, ins):
        x, kk = ins.x, ins.kk
        rnd = self.rng.randint(0, 255)
        self.v_regs[x] = rnd & kk
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{register}")
    def _set_st(self, ins):
        """set ST = Vx"""
        register = ins.x
        self.st = self.v_regs[register]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{register}")
    def _add_to_idx(self, ins):
        """set I = I + Vx, VF is not affected"""
        register = ins.x
        self.idx = (self.idx + self.v_regs[register]) & 0xFFFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{register}")
    def _select_char(self, ins):
        """set I to location of sprite for digit Vx"""
        register = ins.x
        self.idx = FONT_START_ADDRESS + self.v_regs[register] * FONT_GLYPH_SIZE
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x}")
    def _store_vregs(self, ins):
        """store registers V0 through Vx (included) in memory starting at location I, I is left unchanged"""
        x = ins.x
        self.mem[self.idx:self.idx+x+1] = self.v_regs[:x+1]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, [I]")
    def _load_vregs(self, ins):
        """read registers V0 through Vx (included) from memory starting at location I, I is left unchanged"""
        x = ins.x
        self.v_regs[:x+1] = self.mem[self.idx:self.idx+x+1]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x}")
    def _bcd_repr(self, ins):
        """takes the decimal value of Vx and the hundreds digit in memory at I, the tens digit at I+1, the ones digit at I+2"""
        x = ins.x
        ones = self.v_regs[x] % 10
        tens = (self.v_regs[x] // 10) % 10
        hundreds = self.v_regs[x] // 100
        self.mem[self.idx:self.idx+3] = [hundreds, tens, ones]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{x}, V{y}, {n_bytes}")
    def _to_screen(self, ins):
        """
        display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision
        the starting coordinates wrap around the screen, the sprite is clipped at the edges
        """
        x, y, n_bytes = ins.x, ins.y, ins.n
        sprite = self.mem[self.idx:self.idx+n_bytes]
        # sprites are XORed onto the existing screen and if this
        # causes any pixel to be erased then VF=1, otherwise VF=0
        self.v_regs[FLAG_REGISTER] = self.screen.draw_sprite(self.v_regs[x], self.v_regs[y], sprite)
        self.draw = True
        return locals()

    def _goto_next_instruction(self):
        self.pc += INSTRUCTION_SIZE

    def fetch(self):
        """read the two bytes at pc as one big-endian opcode"""
        if self.pc < 0 or self.pc + 1 >= len(self.mem):
            raise MemoryBoundsError(f"PC out of bounds: 0x{self.pc:04x}")
        return self.mem[self.pc] << 8 | self.mem[self.pc + 1]

    def tick_timers(self):
        """decrement delay/sound timers towards zero, frozen while waiting for a key"""
        if self.waiting:
            return
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def cycle(self, tick_timers=True):
        """fetch, decode and execute one instruction, then update the timers unless the host paces them"""
        self.draw = False
        # fetch (each instruction is two bytes long)
        opcode = self.fetch()
        # decode + execute
        instruction = decode(opcode, self.pc)
        self._goto_next_instruction()
        self.instructions[instruction.op](instruction)
        # delay/sound timers (dt/st)
        if tick_timers:
            self.tick_timers()
